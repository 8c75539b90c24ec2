"""Package identity extraction from manifest text.

The manifest is treated as unstructured text: every field has its own
pattern and its own default, so a lossy decode still yields a record.
"""

import re

from apklens.models.apk import PackageRecord

DEFAULT_PACKAGE = "unknown"
DEFAULT_VERSION_NAME = "1.0"
DEFAULT_VERSION_CODE = "1"
DEFAULT_MIN_SDK = "1"

_PACKAGE_RE = re.compile(r'package="([^"]+)"')
_VERSION_NAME_RE = re.compile(r'android:versionName="([^"]+)"')
_VERSION_CODE_RE = re.compile(r'android:versionCode="([^"]+)"')
_MIN_SDK_RE = re.compile(r'android:minSdkVersion="([^"]+)"')
_TARGET_SDK_RE = re.compile(r'android:targetSdkVersion="([^"]+)"')

# One pattern over the whole activity block. The body may span lines but
# never runs past its own </activity>.
_NOT_ACTIVITY_END = r"(?:(?!</activity>).)*?"
_LAUNCHER_RE = re.compile(
    r'<activity[^>]*android:name="([^"]+)"[^>]*(?<!/)>'
    + _NOT_ACTIVITY_END
    + r"<intent-filter[^>]*>"
    + _NOT_ACTIVITY_END
    + r'<action android:name="android\.intent\.action\.MAIN"[^>]*>'
    + _NOT_ACTIVITY_END
    + r'<category android:name="android\.intent\.category\.LAUNCHER"[^>]*>'
    + _NOT_ACTIVITY_END
    + r"</intent-filter>",
    re.DOTALL,
)


def _match(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def qualify_activity(activity: str, package_name: str) -> str:
    """Prefix a bare activity name (no ``.``) with the package name."""
    if "." not in activity:
        return f"{package_name}.{activity}"
    return activity


def find_launcher_activity(manifest: str, package_name: str) -> str | None:
    activity = _match(_LAUNCHER_RE, manifest)
    if activity is None:
        return None
    return qualify_activity(activity, package_name)


def extract_package_info(manifest: str) -> PackageRecord:
    """Extract package facts, defaulting each missing field independently."""
    package_name = _match(_PACKAGE_RE, manifest) or DEFAULT_PACKAGE
    min_sdk = _match(_MIN_SDK_RE, manifest) or DEFAULT_MIN_SDK

    return PackageRecord(
        package_name=package_name,
        version_name=_match(_VERSION_NAME_RE, manifest) or DEFAULT_VERSION_NAME,
        version_code=_match(_VERSION_CODE_RE, manifest) or DEFAULT_VERSION_CODE,
        min_sdk=min_sdk,
        target_sdk=_match(_TARGET_SDK_RE, manifest) or min_sdk,
        main_activity=find_launcher_activity(manifest, package_name),
    )
