"""Security posture flags from manifest text.

Every flag is an independent substring test; flags are not cross-checked.
"""

from apklens.models.apk import SecurityPosture


def analyze_security(manifest: str) -> SecurityPosture:
    return SecurityPosture(
        uses_clear_text_traffic='android:usesCleartextTraffic="true"' in manifest,
        debuggable='android:debuggable="true"' in manifest,
        backup_allowed='android:allowBackup="false"' not in manifest,
        allow_backup='android:allowBackup="true"' in manifest,
        uses_permission_flags="android:protectionLevel=" in manifest,
        has_network_security_config="android:networkSecurityConfig=" in manifest,
        prevents_screenshots='android:preventScreenshots="true"' in manifest,
        uses_encryption='android:encryption="true"' in manifest,
    )
