"""Explicitly owned temporary files for the command line layer."""

import logging
import tempfile
from pathlib import Path
from types import TracebackType
from typing import BinaryIO

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024


class TempFileRegistry:
    """Create temporary files and delete them all on cleanup.

    The registry is an ordinary object: whoever creates it owns the files
    and must call cleanup() (or use it as a context manager).
    """

    def __init__(self, prefix: str = "apklens-"):
        self.prefix = prefix
        self._paths: list[Path] = []

    def __enter__(self) -> "TempFileRegistry":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def __len__(self) -> int:
        return len(self._paths)

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def create(self, data: bytes = b"", suffix: str = "") -> Path:
        """Write bytes to a new temporary file and track it."""
        fd, raw_path = tempfile.mkstemp(prefix=self.prefix, suffix=suffix)
        path = Path(raw_path)
        self._paths.append(path)
        with open(fd, "wb") as f:
            f.write(data)
        return path

    def spool(self, stream: BinaryIO, suffix: str = "") -> Path:
        """Copy a binary stream into a new tracked temporary file."""
        path = self.create(suffix=suffix)
        with path.open("wb") as f:
            while chunk := stream.read(COPY_CHUNK_SIZE):
                f.write(chunk)
        return path

    def cleanup(self) -> None:
        """Delete every tracked file. Safe to call more than once."""
        while self._paths:
            path = self._paths.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove temporary file %s: %s", path, e)
