"""Permission extraction and classification.

Two classifiers live here on purpose. ``is_dangerous`` is exact membership
in the runtime permission set and is used for manifest text.
``is_dangerous_loose`` is a substring heuristic used only for permissions
read from aapt2 badging output. They can disagree on the same name.
"""

import re
from collections.abc import Iterable

from apklens.models.apk import PermissionAnalysis, PermissionEntry, RiskLevel

_USES_PERMISSION_RE = re.compile(
    r'<uses-permission[^>]*android:name="([^"]+)"[^>]*/?>'
)
_DECLARED_PERMISSION_RE = re.compile(r"<permission(?=\s)[^>]*>")
_NAME_ATTR_RE = re.compile(r'android:name="([^"]+)"')
_PROTECTION_LEVEL_ATTR_RE = re.compile(r'android:protectionLevel="([^"]+)"')
_GROUP_ATTR_RE = re.compile(r'android:permissionGroup="([^"]+)"')

DANGEROUS_PERMISSIONS: frozenset[str] = frozenset(
    {
        "android.permission.READ_CALENDAR",
        "android.permission.WRITE_CALENDAR",
        "android.permission.CAMERA",
        "android.permission.READ_CONTACTS",
        "android.permission.WRITE_CONTACTS",
        "android.permission.GET_ACCOUNTS",
        "android.permission.ACCESS_FINE_LOCATION",
        "android.permission.ACCESS_COARSE_LOCATION",
        "android.permission.ACCESS_BACKGROUND_LOCATION",
        "android.permission.RECORD_AUDIO",
        "android.permission.READ_PHONE_STATE",
        "android.permission.READ_PHONE_NUMBERS",
        "android.permission.CALL_PHONE",
        "android.permission.ANSWER_PHONE_CALLS",
        "android.permission.READ_CALL_LOG",
        "android.permission.WRITE_CALL_LOG",
        "android.permission.ADD_VOICEMAIL",
        "android.permission.USE_SIP",
        "android.permission.PROCESS_OUTGOING_CALLS",
        "android.permission.BODY_SENSORS",
        "android.permission.BODY_SENSORS_BACKGROUND",
        "android.permission.ACTIVITY_RECOGNITION",
        "android.permission.SEND_SMS",
        "android.permission.RECEIVE_SMS",
        "android.permission.READ_SMS",
        "android.permission.RECEIVE_WAP_PUSH",
        "android.permission.RECEIVE_MMS",
        "android.permission.READ_EXTERNAL_STORAGE",
        "android.permission.WRITE_EXTERNAL_STORAGE",
        "android.permission.READ_MEDIA_IMAGES",
        "android.permission.READ_MEDIA_VIDEO",
        "android.permission.READ_MEDIA_AUDIO",
        "android.permission.MANAGE_EXTERNAL_STORAGE",
        "android.permission.USE_BIOMETRIC",
        "android.permission.USE_FINGERPRINT",
        "android.permission.BLUETOOTH_CONNECT",
        "android.permission.BLUETOOTH_SCAN",
        "android.permission.BLUETOOTH_ADVERTISE",
        "android.permission.POST_NOTIFICATIONS",
        "android.permission.NEARBY_WIFI_DEVICES",
        "android.permission.READ_MEDIA_VISUAL_USER_SELECTED",
    }
)

# Core set for the loose classifier.
_LOOSE_CORE_PERMISSIONS: frozenset[str] = frozenset(
    {
        "android.permission.READ_CALENDAR",
        "android.permission.WRITE_CALENDAR",
        "android.permission.CAMERA",
        "android.permission.READ_CONTACTS",
        "android.permission.WRITE_CONTACTS",
        "android.permission.GET_ACCOUNTS",
        "android.permission.ACCESS_FINE_LOCATION",
        "android.permission.ACCESS_COARSE_LOCATION",
        "android.permission.RECORD_AUDIO",
    }
)
_LOOSE_KEYWORDS = ("SMS", "CALL", "PHONE", "STORAGE")

HIGH_RISK_PERMISSIONS: frozenset[str] = frozenset(
    _LOOSE_CORE_PERMISSIONS
    | {
        "android.permission.READ_PHONE_STATE",
        "android.permission.READ_PHONE_NUMBERS",
        "android.permission.CALL_PHONE",
        "android.permission.READ_CALL_LOG",
        "android.permission.WRITE_CALL_LOG",
        "android.permission.ADD_VOICEMAIL",
        "android.permission.USE_SIP",
        "android.permission.PROCESS_OUTGOING_CALLS",
        "android.permission.BODY_SENSORS",
        "android.permission.SEND_SMS",
        "android.permission.RECEIVE_SMS",
        "android.permission.READ_SMS",
        "android.permission.RECEIVE_WAP_PUSH",
        "android.permission.RECEIVE_MMS",
        "android.permission.READ_EXTERNAL_STORAGE",
        "android.permission.WRITE_EXTERNAL_STORAGE",
    }
)

ANDROID_PERMISSION_PREFIX = "android.permission."
SIGNATURE_PERMISSION_PREFIX = "android.permission.SIGNATURE"


def is_dangerous(name: str) -> bool:
    return name in DANGEROUS_PERMISSIONS


def is_dangerous_loose(name: str) -> bool:
    """Heuristic classifier for decoder-sourced permission names."""
    if name in _LOOSE_CORE_PERMISSIONS:
        return True
    if name.startswith(("android.permission.READ_", "android.permission.WRITE_")):
        if "_EXTERNAL_STORAGE" in name:
            return True
    return any(keyword in name for keyword in _LOOSE_KEYWORDS)


def extract_permissions(manifest: str) -> list[PermissionEntry]:
    """Collect requested permissions in document order.

    Falls back to ``<permission>`` declarations only when the manifest
    requests nothing; those entries also carry the declared protection
    level and group. Duplicates are kept.
    """
    names = _USES_PERMISSION_RE.findall(manifest)
    if names:
        return [
            PermissionEntry(name=name, is_dangerous=is_dangerous(name))
            for name in names
        ]

    return [
        entry
        for tag in _DECLARED_PERMISSION_RE.findall(manifest)
        if (entry := _declared_permission(tag)) is not None
    ]


def _declared_permission(tag: str) -> PermissionEntry | None:
    name = _attr(_NAME_ATTR_RE, tag)
    if name is None:
        return None
    return PermissionEntry(
        name=name,
        is_dangerous=is_dangerous(name),
        protection_level=_attr(_PROTECTION_LEVEL_ATTR_RE, tag),
        group=_attr(_GROUP_ATTR_RE, tag),
    )


def _attr(pattern: re.Pattern[str], tag: str) -> str | None:
    match = pattern.search(tag)
    return match.group(1) if match else None


def classify_loose(names: Iterable[str]) -> list[PermissionEntry]:
    return [
        PermissionEntry(name=name, is_dangerous=is_dangerous_loose(name))
        for name in names
    ]


def analyze_permissions(permissions: list[PermissionEntry]) -> PermissionAnalysis:
    """Summarize a permission list into counts and a risk level.

    Dangerous counts follow each entry's own flag, so the summary agrees
    with whichever classifier produced the list.
    """
    dangerous = normal = signature = other = 0
    high_risk: list[str] = []

    for permission in permissions:
        name = permission.name
        if permission.is_dangerous:
            dangerous += 1
            if name in HIGH_RISK_PERMISSIONS:
                high_risk.append(name)
        elif name.startswith(SIGNATURE_PERMISSION_PREFIX):
            signature += 1
        elif name.startswith(ANDROID_PERMISSION_PREFIX):
            normal += 1
        else:
            other += 1

    if dangerous > 5:
        risk_level = RiskLevel.HIGH
    elif dangerous > 2:
        risk_level = RiskLevel.MEDIUM
    else:
        risk_level = RiskLevel.LOW

    return PermissionAnalysis(
        total_permissions=len(permissions),
        dangerous_permissions=dangerous,
        normal_permissions=normal,
        signature_permissions=signature,
        other_permissions=other,
        high_risk_permissions=high_risk,
        risk_level=risk_level,
    )
