"""APK file path validation."""

import os
from pathlib import Path

from apklens.exceptions import ApkReadError


def validate_apk_path(apk_path: Path) -> None:
    """Check that the path names a readable regular file.

    The file name is not checked; any ZIP is accepted as an APK. Whether the
    contents are a ZIP at all is left to ApkArchive.

    Raises:
        ApkReadError: If the file is missing, not a file, or unreadable.
    """
    if not apk_path.exists():
        raise ApkReadError(f"APK not found: {apk_path}")

    if not apk_path.is_file():
        raise ApkReadError(f"Not a file: {apk_path}")

    if not os.access(apk_path, os.R_OK):
        raise ApkReadError(f"APK is not readable: {apk_path}")
