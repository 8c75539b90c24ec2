"""APK analysis orchestration.

``ApkParser.parse`` prefers aapt2 badging output for package facts and falls
back to the internal manifest pipeline. Signature, icon and hashes always
come from the file itself, and each step opens the archive on its own.
"""

import logging
from pathlib import Path

from apklens.core.aapt import BadgingInfo, dump_badging, parse_badging
from apklens.core.archive import ApkArchive
from apklens.core.hashing import build_file_info
from apklens.core.icon import resolve_icon
from apklens.core.manifest import resolve_manifest
from apklens.core.package_info import extract_package_info
from apklens.core.permissions import (
    analyze_permissions,
    classify_loose,
    extract_permissions,
)
from apklens.core.security import analyze_security
from apklens.core.signature import UNKNOWN, extract_signature
from apklens.models.apk import (
    AnalysisResult,
    ExtractionSource,
    PackageRecord,
    SignatureRecord,
)
from apklens.utils.apk import validate_apk_path
from apklens.utils.decoder import locate_decoder

logger = logging.getLogger(__name__)

BADGING_DEFAULT_VERSION_CODE = "0"


def badging_signature(info: BadgingInfo) -> SignatureRecord | None:
    """Signature summary from badging text, if it carried issuer or subject."""
    if info.issuer is None and info.subject is None:
        return None
    return SignatureRecord(
        issuer=info.issuer or UNKNOWN,
        subject=info.subject or UNKNOWN,
        valid_from=UNKNOWN,
        valid_to=UNKNOWN,
    )


class ApkParser:
    """Extract an AnalysisResult from an APK file."""

    def __init__(
        self,
        apk_path: Path,
        *,
        use_decoder: bool = True,
        include_icon: bool = True,
    ):
        """Initialize the parser.

        Args:
            apk_path: Path to the APK file to analyze.
            use_decoder: If False, never invoke aapt2.
            include_icon: If False, skip icon lookup.
        """
        self.apk_path = apk_path.resolve()
        self.use_decoder = use_decoder
        self.include_icon = include_icon

    def parse(self) -> AnalysisResult:
        """Analyze the APK.

        Returns:
            AnalysisResult built from the decoder or the internal pipeline.

        Raises:
            ApkReadError: If the file is missing or unreadable.
            InvalidArchiveError: If the file is not a ZIP.
            ManifestNotFoundError: If the internal pipeline finds no manifest.
        """
        validate_apk_path(self.apk_path)
        logger.info("Parsing %s", self.apk_path)

        decoder = locate_decoder() if self.use_decoder else None
        if decoder is not None:
            result = self._parse_with_decoder(decoder)
            if result is not None:
                return result
            logger.warning("aapt2 badging unusable, falling back to internal parser")

        return self._parse_internal(decoder)

    def _icon(
        self, manifest: str | None = None, hint: str | None = None
    ) -> str | None:
        if not self.include_icon:
            return None
        return resolve_icon(self.apk_path, manifest, hint)

    def _entry_count(self) -> int:
        with ApkArchive(self.apk_path) as archive:
            return archive.entry_count

    def _parse_with_decoder(self, decoder: Path) -> AnalysisResult | None:
        output = dump_badging(decoder, self.apk_path)
        if output is None:
            return None

        info = parse_badging(output)
        if info is None:
            return None
        logger.info("Package facts from aapt2: %s", info.package_name)

        package = PackageRecord(
            package_name=info.package_name,
            version_name=info.version_name or UNKNOWN,
            version_code=info.version_code or BADGING_DEFAULT_VERSION_CODE,
            min_sdk=info.min_sdk or UNKNOWN,
            target_sdk=info.target_sdk or UNKNOWN,
            main_activity=info.main_activity,
        )
        permissions = classify_loose(info.permissions)
        signature = badging_signature(info) or extract_signature(self.apk_path)

        return AnalysisResult(
            apk_path=self.apk_path,
            source=ExtractionSource.DECODER,
            package=package,
            permissions=permissions,
            permission_analysis=analyze_permissions(permissions),
            signature=signature,
            file_info=build_file_info(self.apk_path, self._entry_count()),
            icon_base64=self._icon(hint=info.icon_path),
            security=None,
        )

    def _parse_internal(self, decoder: Path | None) -> AnalysisResult:
        entry_count = self._entry_count()

        manifest = resolve_manifest(
            self.apk_path, decoder, use_decoder=decoder is not None
        )
        package = extract_package_info(manifest)
        logger.info(
            "Package: %s %s", package.package_name, package.formatted_version_info
        )

        permissions = extract_permissions(manifest)
        logger.debug(
            "%d permissions, %d dangerous",
            len(permissions),
            sum(p.is_dangerous for p in permissions),
        )

        return AnalysisResult(
            apk_path=self.apk_path,
            source=ExtractionSource.INTERNAL,
            package=package,
            permissions=permissions,
            permission_analysis=analyze_permissions(permissions),
            signature=extract_signature(self.apk_path),
            file_info=build_file_info(self.apk_path, entry_count),
            icon_base64=self._icon(manifest=manifest),
            security=analyze_security(manifest),
        )


def parse_apk(
    apk_path: Path,
    *,
    use_decoder: bool = True,
    include_icon: bool = True,
) -> AnalysisResult:
    """Convenience wrapper around ApkParser(apk_path).parse()."""
    return ApkParser(
        apk_path, use_decoder=use_decoder, include_icon=include_icon
    ).parse()
