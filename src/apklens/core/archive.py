"""Random-access view of an APK as a ZIP container."""

import logging
import zlib
from collections.abc import Callable, Iterator
from pathlib import Path
from types import TracebackType
from zipfile import BadZipFile, ZipFile, ZipInfo

from apklens.exceptions import ApkReadError, InvalidArchiveError

logger = logging.getLogger(__name__)

MANIFEST_ENTRY = "AndroidManifest.xml"


class ApkArchive:
    """Open an APK once and look up entries by name or by scanning.

    Use as a context manager; the underlying handle is closed on exit.
    """

    def __init__(self, apk_path: Path):
        self.apk_path = apk_path
        try:
            self._zip = ZipFile(apk_path, "r")
        except BadZipFile as e:
            raise InvalidArchiveError(
                f"Invalid APK (not a valid ZIP file): {apk_path}: {e}"
            ) from e
        except OSError as e:
            raise ApkReadError(f"Failed to open APK: {e}") from e

    def __enter__(self) -> "ApkArchive":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    @property
    def entry_count(self) -> int:
        return len(self._zip.infolist())

    def names(self) -> list[str]:
        """Entry names in container order."""
        return self._zip.namelist()

    def has(self, name: str) -> bool:
        try:
            self._zip.getinfo(name)
        except KeyError:
            return False
        return True

    def read(self, name: str) -> bytes | None:
        """Read an entry by exact name.

        Returns:
            The entry bytes, or None if the entry is missing or unreadable.
        """
        try:
            return self._zip.read(name)
        except KeyError:
            return None
        except (
            BadZipFile,
            EOFError,
            OSError,
            RuntimeError,
            ValueError,
            zlib.error,
        ) as e:
            # Corrupt or truncated data, unsupported compression, encryption.
            logger.debug("Could not read entry %s: %s", name, e)
            return None

    def scan(self, predicate: Callable[[str], bool]) -> Iterator[ZipInfo]:
        """Yield entries whose name matches, in container order."""
        for info in self._zip.infolist():
            if not info.is_dir() and predicate(info.filename):
                yield info

    def read_info(self, info: ZipInfo) -> bytes | None:
        return self.read(info.filename)
