"""Pydantic models for APK analysis results."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, computed_field

APK_CONTENT_TYPE = "application/vnd.android.package-archive"


class ExtractionSource(StrEnum):
    """Which pipeline produced the package facts."""

    DECODER = "decoder"
    INTERNAL = "internal"


class RiskLevel(StrEnum):
    """Coarse risk rating derived from dangerous permission count."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class PackageRecord(BaseModel):
    """Package identity and SDK constraints."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    """Full package name (e.g., com.example.app)."""

    version_name: str
    """Version string (e.g., 1.0.0)."""

    version_code: str
    """Version code, kept as the string found in the manifest."""

    min_sdk: str
    """Minimum SDK level."""

    target_sdk: str
    """Target SDK level."""

    main_activity: str | None = None
    """Fully qualified launcher activity, if one was found."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def formatted_version_info(self) -> str:
        return f"{self.version_name} ({self.version_code})"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def formatted_sdk_info(self) -> str:
        return f"Min SDK: {self.min_sdk}, Target SDK: {self.target_sdk}"


class PermissionEntry(BaseModel):
    """A permission requested or declared by the package."""

    model_config = ConfigDict(frozen=True)

    name: str
    is_dangerous: bool = False
    protection_level: str | None = None
    """Declared protectionLevel; only set for <permission> declarations."""

    group: str | None = None
    """Declared permissionGroup; only set for <permission> declarations."""


class PermissionAnalysis(BaseModel):
    """Summary counts over a permission list."""

    model_config = ConfigDict(frozen=True)

    total_permissions: int = 0
    dangerous_permissions: int = 0
    normal_permissions: int = 0
    signature_permissions: int = 0
    other_permissions: int = 0
    high_risk_permissions: list[str] = []
    risk_level: RiskLevel = RiskLevel.LOW


class SignatureRecord(BaseModel):
    """Signing certificate summary.

    Validity bounds are display strings, not timestamps: depending on which
    extraction tier produced the record they may be RFC 2822 dates or the
    literal ``unknown``.
    """

    model_config = ConfigDict(frozen=True)

    issuer: str
    subject: str
    valid_from: str
    valid_to: str
    fingerprint_sha1: str | None = None
    fingerprint_sha256: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_expired(self) -> bool:
        """True if ``valid_to`` is a parseable date in the past."""
        try:
            expiry = parsedate_to_datetime(self.valid_to)
        except (TypeError, ValueError, IndexError):
            return False
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry < datetime.now(timezone.utc)


class FileDigestRecord(BaseModel):
    """Whole-file digests and container facts."""

    model_config = ConfigDict(frozen=True)

    md5: str
    sha1: str
    sha256: str
    file_size: int
    file_type: str = APK_CONTENT_TYPE
    entry_count: int = 0


class SecurityPosture(BaseModel):
    """Security-related manifest flags. Each flag is tested independently."""

    model_config = ConfigDict(frozen=True)

    uses_clear_text_traffic: bool = False
    debuggable: bool = False
    backup_allowed: bool = True
    allow_backup: bool = True
    uses_permission_flags: bool = False
    has_network_security_config: bool | None = None
    prevents_screenshots: bool | None = None
    uses_encryption: bool | None = None


class AnalysisResult(BaseModel):
    """Everything extracted from one APK."""

    model_config = ConfigDict(frozen=True)

    apk_path: Path
    """Path to the analyzed APK."""

    source: ExtractionSource
    """Pipeline that produced the package facts."""

    package: PackageRecord
    permissions: list[PermissionEntry] = []
    permission_analysis: PermissionAnalysis = PermissionAnalysis()
    signature: SignatureRecord | None = None
    file_info: FileDigestRecord | None = None
    icon_base64: str | None = None
    """Base64 of the raw icon bytes; the image format is not tracked."""

    security: SecurityPosture | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def dangerous_permissions(self) -> list[str]:
        return [p.name for p in self.permissions if p.is_dangerous]
