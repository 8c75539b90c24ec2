"""Launcher icon lookup.

Candidates are tried in priority order: an explicit image hint (the icon path
aapt2 reports, which stands in for the manifest reference), paths derived from
the manifest's ``android:icon`` reference, a fixed list of conventional
locations, and finally any entry whose name looks like an icon. The first
entry that exists and reads wins.
"""

import base64
import logging
import re
from pathlib import Path

from apklens.core.archive import ApkArchive
from apklens.exceptions import ApkLensError

logger = logging.getLogger(__name__)

DENSITIES: tuple[str, ...] = ("xxxhdpi", "xxhdpi", "xhdpi", "hdpi", "mdpi")

ICON_NAME_MARKERS: tuple[str, ...] = ("/icon", "/ic_launcher", "/app_icon", "/logo")
ICON_EXTENSIONS: tuple[str, ...] = (".png", ".webp", ".jpg", ".jpeg")

_APP_ICON_RE = re.compile(r'<application\s+[^>]*android:icon\s*=\s*"([^"]+)"')


def _per_density(directory: str, filename: str) -> list[str]:
    return [f"res/{directory}-{density}/{filename}" for density in DENSITIES]


STANDARD_ICON_PATHS: tuple[str, ...] = (
    # Standard mipmap launcher icons
    *_per_density("mipmap", "ic_launcher.png"),
    # Round icons (Android 8.0+)
    *_per_density("mipmap", "ic_launcher_round.png"),
    # Adaptive icon foregrounds
    *_per_density("mipmap", "ic_launcher_foreground.png"),
    # Plain drawables
    "res/drawable/ic_launcher.png",
    *_per_density("drawable", "ic_launcher.png"),
    # "icon.png" family
    *_per_density("mipmap", "icon.png"),
    "res/drawable/icon.png",
    *_per_density("drawable", "icon.png"),
    # Other known names and locations
    "res/drawable/app_icon.png",
    "assets/icon.png",
    "assets/app_icon.png",
    "assets/icons/app_icon.png",
    "assets/images/icon.png",
    # WEBP
    *_per_density("mipmap", "ic_launcher.webp"),
    "res/drawable/ic_launcher.webp",
    # JPEG
    "res/drawable/ic_launcher.jpg",
    "res/drawable/icon.jpg",
)


def manifest_icon_paths(manifest: str) -> list[str]:
    """Concrete PNG paths for the application's icon resource reference."""
    match = _APP_ICON_RE.search(manifest)
    if match is None:
        return []

    reference = match.group(1)
    logger.debug("Manifest icon reference: %s", reference)

    if reference.startswith("@mipmap/"):
        name = reference.removeprefix("@mipmap/")
        return _per_density("mipmap", f"{name}.png")

    if reference.startswith("@drawable/"):
        name = reference.removeprefix("@drawable/")
        return [f"res/drawable/{name}.png", *_per_density("drawable", f"{name}.png")]

    return []


def icon_candidates(manifest: str | None = None, hint: str | None = None) -> list[str]:
    """All fixed-path candidates in priority order.

    A hint is only used when it names an image; adaptive icon XML is skipped.
    """
    candidates: list[str] = []
    if hint and hint.lower().endswith(ICON_EXTENSIONS):
        candidates.append(hint)
    elif hint:
        logger.debug("Ignoring non-image icon hint %s", hint)
    if manifest:
        candidates.extend(manifest_icon_paths(manifest))
    candidates.extend(STANDARD_ICON_PATHS)
    return candidates


def looks_like_icon(name: str) -> bool:
    return any(marker in name for marker in ICON_NAME_MARKERS) and name.endswith(
        ICON_EXTENSIONS
    )


def find_icon(
    archive: ApkArchive,
    manifest: str | None = None,
    hint: str | None = None,
) -> tuple[str, bytes] | None:
    """Locate the icon entry.

    Returns:
        (entry name, bytes) of the first readable candidate, or None.
    """
    for path in icon_candidates(manifest, hint):
        data = archive.read(path)
        if data is not None:
            return path, data

    logger.debug("No icon at known paths, scanning all entries")
    for info in archive.scan(looks_like_icon):
        data = archive.read_info(info)
        if data is not None:
            return info.filename, data

    return None


def resolve_icon(
    apk_path: Path,
    manifest: str | None = None,
    hint: str | None = None,
) -> str | None:
    """Return the launcher icon as base64, or None. Never raises."""
    try:
        archive = ApkArchive(apk_path)
    except ApkLensError as e:
        logger.warning("Icon lookup skipped: %s", e)
        return None

    with archive:
        found = find_icon(archive, manifest, hint)

    if found is None:
        logger.info("No application icon found")
        return None

    name, data = found
    logger.debug("Using icon %s (%d bytes)", name, len(data))
    return base64.b64encode(data).decode("ascii")
