"""Obtain AndroidManifest.xml as text through a tiered fallback chain.

Tiers, first non-None result wins:

1. aapt2 ``dump xmltree`` when a real decoder is available.
2. The raw entry, if it is already plain-text XML.
3. Binary AXML decoding with pyaxmlparser. A successful decode currently
   yields the minimal stub below, not the decoded document.
4. The minimal stub.

Only a missing manifest entry is an error.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pyaxmlparser.axmlprinter import AXMLPrinter  # type: ignore[import-untyped]

from apklens.core.aapt import dump_xmltree
from apklens.core.archive import MANIFEST_ENTRY, ApkArchive
from apklens.exceptions import ManifestNotFoundError
from apklens.utils.decoder import locate_decoder

logger = logging.getLogger(__name__)

STUB_MANIFEST = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<manifest xmlns:android="http://schemas.android.com/apk/res/android">\n'
    "</manifest>"
)


@dataclass(frozen=True)
class ManifestSource:
    """Inputs shared by every resolution tier."""

    apk_path: Path
    raw: bytes
    decoder: Path | None = None


ManifestStrategy = Callable[[ManifestSource], str | None]


def from_decoder(source: ManifestSource) -> str | None:
    if source.decoder is None:
        return None
    return dump_xmltree(source.decoder, source.apk_path)


def from_plain_text(source: ManifestSource) -> str | None:
    try:
        text = source.raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return None

    if text.lstrip().startswith("<?xml") or "<manifest" in text:
        logger.debug("Manifest is plain-text XML")
        return text
    return None


def _decodes_as_axml(raw: bytes) -> bool:
    try:
        root = AXMLPrinter(raw).get_xml_obj()
    except Exception as e:  # pyaxmlparser raises a mix of parse errors
        logger.debug("Binary manifest decode failed: %s", e)
        return False
    return root is not None


def from_binary(source: ManifestSource) -> str | None:
    if not _decodes_as_axml(source.raw):
        return None
    # TODO: feed the decoded tree to the extractors instead of the stub once
    # consumers accept the resulting change in reported package facts.
    logger.warning(
        "Binary manifest decoded, but its contents are discarded; "
        "package facts will fall back to defaults"
    )
    return STUB_MANIFEST


def stub(source: ManifestSource) -> str:
    logger.info("Could not decode manifest, using minimal stub")
    return STUB_MANIFEST


MANIFEST_STRATEGIES: tuple[ManifestStrategy, ...] = (
    from_decoder,
    from_plain_text,
    from_binary,
    stub,
)


def read_manifest_entry(apk_path: Path) -> bytes:
    """Read the raw manifest entry.

    Raises:
        ApkReadError: If the file cannot be opened.
        InvalidArchiveError: If the file is not a ZIP.
        ManifestNotFoundError: If the entry is absent or unreadable.
    """
    with ApkArchive(apk_path) as archive:
        raw = archive.read(MANIFEST_ENTRY)
    if raw is None:
        raise ManifestNotFoundError(str(apk_path))
    logger.debug("Found %s, %d bytes", MANIFEST_ENTRY, len(raw))
    return raw


def resolve_manifest(
    apk_path: Path,
    decoder: Path | None = None,
    *,
    use_decoder: bool = True,
) -> str:
    """Return the manifest of an APK as text.

    Args:
        apk_path: APK to read.
        decoder: aapt2 path to use. Located automatically when None and
            use_decoder is True.
        use_decoder: If False, skip the external decoder tier entirely.

    Returns:
        Manifest text; never empty.

    Raises:
        ManifestNotFoundError: If the archive has no manifest entry.
    """
    raw = read_manifest_entry(apk_path)

    if use_decoder and decoder is None:
        decoder = locate_decoder()

    source = ManifestSource(
        apk_path=apk_path,
        raw=raw,
        decoder=decoder if use_decoder else None,
    )

    for strategy in MANIFEST_STRATEGIES:
        text = strategy(source)
        if text is not None:
            return text

    return STUB_MANIFEST
