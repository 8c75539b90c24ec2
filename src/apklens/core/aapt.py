"""aapt2 invocation and badging output parsing."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from apklens.core.archive import MANIFEST_ENTRY
from apklens.exceptions import ProcessError
from apklens.utils.process import run_tool

logger = logging.getLogger(__name__)

MAIN_ACTION = "android.intent.action.MAIN"
LAUNCHER_CATEGORY = "android.intent.category.LAUNCHER"

_PACKAGE_RE = re.compile(r"package: name='([^']+)'")
_VERSION_NAME_RE = re.compile(r"versionName='([^']+)'")
_VERSION_CODE_RE = re.compile(r"versionCode='(\d+)'")
_MIN_SDK_RE = re.compile(r"sdkVersion:'(\d+)'")
_TARGET_SDK_RE = re.compile(r"targetSdkVersion:'(\d+)'")
_PERMISSION_RE = re.compile(r"uses-permission: name='([^']+)'")
_ACTIVITY_RE = re.compile(r"activity: name='([^']+)'")
_ISSUER_RE = re.compile(r"Issuer: ([^\n]+)")
_SUBJECT_RE = re.compile(r"Subject: ([^\n]+)")
_APP_ICON_RE = re.compile(r"^application: [^\n]*?icon='([^']+)'", re.MULTILINE)
_SAME_BLOCK = r"(?:(?!activity: name=)[\s\S])*?"


def _run_decoder(decoder: Path, args: list[str]) -> str | None:
    command = [str(decoder), *args]
    logger.debug("Running %s", " ".join(command))
    try:
        result = run_tool(command, check=False)
    except ProcessError as e:
        logger.warning("Failed to run %s: %s", decoder, e.stderr)
        return None

    if not result.success:
        logger.warning(
            "%s exited with %d: %s", decoder.name, result.returncode, result.stderr
        )
        return None

    return result.stdout


def dump_xmltree(decoder: Path, apk_path: Path) -> str | None:
    """Dump the manifest XML tree. Returns stdout, or None on failure."""
    return _run_decoder(
        decoder, ["dump", "xmltree", "--file", MANIFEST_ENTRY, str(apk_path)]
    )


def dump_badging(decoder: Path, apk_path: Path) -> str | None:
    """Dump whole-package badging info. Returns stdout, or None on failure."""
    return _run_decoder(decoder, ["dump", "badging", str(apk_path)])


@dataclass(frozen=True)
class BadgingInfo:
    """Facts parsed out of ``aapt2 dump badging`` text.

    Fields are None when the corresponding line was absent.
    """

    package_name: str
    version_name: str | None = None
    version_code: str | None = None
    min_sdk: str | None = None
    target_sdk: str | None = None
    permissions: list[str] = field(default_factory=list)
    main_activity: str | None = None
    issuer: str | None = None
    subject: str | None = None
    icon_path: str | None = None


def _first(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def find_launcher_activity(output: str) -> str | None:
    """Pick the activity whose block declares MAIN and LAUNCHER.

    Each activity gets its own anchored pattern that stops at the next
    activity line; if none matches, the first activity listed is returned.
    """
    activities = _ACTIVITY_RE.findall(output)

    for activity in activities:
        launcher_re = re.compile(
            f"activity: name='{re.escape(activity)}'"
            rf"{_SAME_BLOCK}action: name='{re.escape(MAIN_ACTION)}'"
            rf"{_SAME_BLOCK}category: name='{re.escape(LAUNCHER_CATEGORY)}'"
        )
        if launcher_re.search(output):
            return activity

    return activities[0] if activities else None


def parse_badging(output: str) -> BadgingInfo | None:
    """Parse badging output.

    Returns:
        BadgingInfo, or None if the output has no package name.
    """
    package_name = _first(_PACKAGE_RE, output)
    if package_name is None:
        return None

    return BadgingInfo(
        package_name=package_name,
        version_name=_first(_VERSION_NAME_RE, output),
        version_code=_first(_VERSION_CODE_RE, output),
        min_sdk=_first(_MIN_SDK_RE, output),
        target_sdk=_first(_TARGET_SDK_RE, output),
        permissions=_PERMISSION_RE.findall(output),
        main_activity=find_launcher_activity(output),
        issuer=_first(_ISSUER_RE, output),
        subject=_first(_SUBJECT_RE, output),
        icon_path=_first(_APP_ICON_RE, output),
    )
