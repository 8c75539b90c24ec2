"""Android SDK lookup, used only to find a build-tools aapt2."""

import os
import platform
from pathlib import Path

SDK_ENV_VARS = ("ANDROID_HOME", "ANDROID_SDK_ROOT")

# Relative to the home directory unless absolute.
_DEFAULT_SDK_DIRS: dict[str, tuple[str, ...]] = {
    "Darwin": ("Library/Android/sdk", "/opt/android-sdk"),
    "Linux": ("Android/Sdk", "android-sdk", "/opt/android-sdk"),
    "Windows": ("AppData/Local/Android/Sdk", "C:/Android/sdk"),
}


def get_android_home() -> Path | None:
    """Find the SDK root from the environment or a default install location."""
    for env_var in SDK_ENV_VARS:
        value = os.environ.get(env_var)
        if value and Path(value).is_dir():
            return Path(value)

    home = Path.home()
    for location in _DEFAULT_SDK_DIRS.get(platform.system(), ()):
        path = home / location
        if path.is_dir():
            return path

    return None


def _version_key(name: str) -> tuple[int, ...] | None:
    # Preview directories such as 35.0.0-rc1 are not considered.
    try:
        return tuple(int(part) for part in name.split("."))
    except ValueError:
        return None


def get_build_tools_path(min_version: str = "28.0.0") -> Path | None:
    """Newest ``build-tools/<version>`` directory at or above min_version."""
    android_home = get_android_home()
    if android_home is None:
        return None

    build_tools_dir = android_home / "build-tools"
    if not build_tools_dir.is_dir():
        return None

    floor = _version_key(min_version) or ()
    best: tuple[tuple[int, ...], Path] | None = None
    for entry in build_tools_dir.iterdir():
        key = _version_key(entry.name)
        if key is None or key < floor or not entry.is_dir():
            continue
        if best is None or key > best[0]:
            best = (key, entry)

    return best[1] if best else None


def executable_name(tool: str) -> str:
    """Platform-specific executable file name for a build tool."""
    return f"{tool}.exe" if platform.system() == "Windows" else tool


def get_sdk_aapt2() -> Path | None:
    build_tools = get_build_tools_path()
    if build_tools is None:
        return None

    aapt2 = build_tools / executable_name("aapt2")
    return aapt2 if aapt2.is_file() else None
