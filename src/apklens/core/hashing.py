"""Whole-file digests for APK files."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

from apklens.exceptions import ApkReadError
from apklens.models.apk import APK_CONTENT_TYPE, FileDigestRecord

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FileHashes:
    """MD5, SHA-1 and SHA-256 of a file, as lowercase hex."""

    md5: str
    sha1: str
    sha256: str
    size: int


def hash_file(path: Path) -> FileHashes:
    """Stream a file once through MD5, SHA-1 and SHA-256.

    Args:
        path: File to digest.

    Returns:
        FileHashes for the full file contents.

    Raises:
        ApkReadError: If the file cannot be opened or read.
    """
    md5 = hashlib.md5()
    sha1 = hashlib.sha1()
    sha256 = hashlib.sha256()
    buffer = bytearray(CHUNK_SIZE)
    view = memoryview(buffer)
    size = 0

    try:
        with path.open("rb") as f:
            while n := f.readinto(buffer):
                chunk = view[:n]
                md5.update(chunk)
                sha1.update(chunk)
                sha256.update(chunk)
                size += n
    except OSError as e:
        raise ApkReadError(f"Failed to read {path}: {e}") from e

    return FileHashes(
        md5=md5.hexdigest(),
        sha1=sha1.hexdigest(),
        sha256=sha256.hexdigest(),
        size=size,
    )


def build_file_info(path: Path, entry_count: int) -> FileDigestRecord:
    """Digest a file and wrap the result with container facts."""
    hashes = hash_file(path)
    return FileDigestRecord(
        md5=hashes.md5,
        sha1=hashes.sha1,
        sha256=hashes.sha256,
        file_size=hashes.size,
        file_type=APK_CONTENT_TYPE,
        entry_count=entry_count,
    )
