"""Signing certificate extraction from the META-INF signature block.

The first signature-related entry that exists decides the result. Each
entry is run through the parse tiers in order; a found entry always yields
a record, even when no tier recognises its contents. When the archive has
no such entry at all, a placeholder record carrying
MISSING_SIGNATURE_SENTINEL is returned so callers never see None.
"""

import calendar
import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from pathlib import Path

from cryptography import x509

from apklens.core.archive import ApkArchive
from apklens.models.apk import SignatureRecord

logger = logging.getLogger(__name__)

SIGNATURE_ENTRY_PATHS: tuple[str, ...] = (
    "META-INF/CERT.RSA",
    "META-INF/CERT.DSA",
    "META-INF/CERT.EC",
    "META-INF/ANDROID.RSA",
    "META-INF/ANDROIDD.RSA",
    "META-INF/CERT.SF",
    "META-INF/MANIFEST.MF",
)

UNKNOWN = "unknown"
MISSING_SIGNATURE_SENTINEL = "MISSING_SIGNATURE_FILE"
DEFAULT_CREATED_BY = "Created-By: Unknown"
SYNTHETIC_VALIDITY_MONTHS = 60

SignatureTier = Callable[[str, bytes], SignatureRecord | None]


def colon_fingerprint(data: bytes, algorithm: str) -> str:
    """Digest bytes and format as ``AA:BB:...`` uppercase hex."""
    digest = hashlib.new(algorithm, data).digest()
    return ":".join(f"{b:02X}" for b in digest)


def prefixed_fingerprints(data: bytes) -> tuple[str, str]:
    """SHA-1 and SHA-256 of raw bytes as ``SHA1:<hex>`` / ``SHA256:<hex>``."""
    return (
        f"SHA1:{hashlib.sha1(data).hexdigest()}",
        f"SHA256:{hashlib.sha256(data).hexdigest()}",
    )


def display_date(moment: datetime) -> str:
    """Format a datetime as an RFC 2822 display string."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def from_der_certificate(path: str, data: bytes) -> SignatureRecord | None:
    """Tier 1: the entry is a bare DER X.509 certificate.

    Fingerprints cover the to-be-signed portion of the certificate.
    """
    try:
        cert = x509.load_der_x509_certificate(data)
        issuer = cert.issuer.rfc4514_string()
        subject = cert.subject.rfc4514_string()
        valid_from = display_date(cert.not_valid_before_utc)
        valid_to = display_date(cert.not_valid_after_utc)
        tbs = cert.tbs_certificate_bytes
    except ValueError as e:
        logger.debug("%s is not a DER certificate: %s", path, e)
        return None

    logger.debug("Parsed certificate from %s: issuer=%s", path, issuer)
    return SignatureRecord(
        issuer=issuer,
        subject=subject,
        valid_from=valid_from,
        valid_to=valid_to,
        fingerprint_sha1=colon_fingerprint(tbs, "sha1"),
        fingerprint_sha256=colon_fingerprint(tbs, "sha256"),
    )


def from_signature_manifest(path: str, data: bytes) -> SignatureRecord | None:
    """Tier 2: a .SF/.MF text file; only its Created-By line is meaningful."""
    if not path.endswith((".SF", ".MF")):
        return None

    content = data.decode("utf-8", errors="replace")
    created_by = next(
        (line for line in content.splitlines() if line.startswith("Created-By:")),
        DEFAULT_CREATED_BY,
    ).strip()
    sha1, sha256 = prefixed_fingerprints(data)

    return SignatureRecord(
        issuer=created_by,
        subject=f"Signature data extracted from {path}",
        valid_from=UNKNOWN,
        valid_to=UNKNOWN,
        fingerprint_sha1=sha1,
        fingerprint_sha256=sha256,
    )


def synthesized(path: str, data: bytes) -> SignatureRecord:
    """Tier 3: an opaque signature block, e.g. a PKCS#7 envelope."""
    now = datetime.now(timezone.utc)
    sha1, sha256 = prefixed_fingerprints(data)

    return SignatureRecord(
        issuer=f"Signature data extracted from {path}",
        subject="Android application signature",
        valid_from=display_date(now),
        valid_to=display_date(add_months(now, SYNTHETIC_VALIDITY_MONTHS)),
        fingerprint_sha1=sha1,
        fingerprint_sha256=sha256,
    )


SIGNATURE_TIERS: tuple[SignatureTier, ...] = (
    from_der_certificate,
    from_signature_manifest,
)


def missing_signature() -> SignatureRecord:
    """Placeholder for archives without any signature entry."""
    now = datetime.now(timezone.utc)
    return SignatureRecord(
        issuer=UNKNOWN,
        subject=UNKNOWN,
        valid_from=display_date(now),
        valid_to=display_date(now + timedelta(days=1)),
        fingerprint_sha1=MISSING_SIGNATURE_SENTINEL,
        fingerprint_sha256=MISSING_SIGNATURE_SENTINEL,
    )


def parse_signature_entry(path: str, data: bytes) -> SignatureRecord:
    for tier in SIGNATURE_TIERS:
        record = tier(path, data)
        if record is not None:
            return record
    return synthesized(path, data)


def extract_signature_from_archive(archive: ApkArchive) -> SignatureRecord:
    for path in SIGNATURE_ENTRY_PATHS:
        data = archive.read(path)
        if data is None:
            continue
        logger.debug("Found signature entry %s, %d bytes", path, len(data))
        return parse_signature_entry(path, data)

    logger.warning("No signature entry found in %s", archive.apk_path)
    return missing_signature()


def extract_signature(apk_path: Path) -> SignatureRecord:
    """Open the APK and extract its signing certificate summary.

    Raises:
        ApkReadError: If the file cannot be opened.
        InvalidArchiveError: If the file is not a ZIP.
    """
    with ApkArchive(apk_path) as archive:
        return extract_signature_from_archive(archive)
