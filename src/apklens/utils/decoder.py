"""Locate and validate the external aapt2 manifest/badging decoder."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Final

from apklens.exceptions import DecoderNotFoundError
from apklens.utils.android_sdk import executable_name, get_sdk_aapt2
from apklens.utils.config import get_config_value

logger = logging.getLogger(__name__)

AAPT2_ENV_VAR: Final[str] = "APKLENS_AAPT2"
AAPT2_CONFIG_KEY: Final[str] = "aapt2_path"

# Bundled stand-ins are tiny text files; real binaries are far larger.
MIN_EXECUTABLE_SIZE: Final[int] = 1000

EXECUTABLE_MAGICS: Final[tuple[bytes, ...]] = (
    b"MZ",  # PE (Windows)
    b"\x7fELF",
    b"\xfe\xed\xfa\xce",  # Mach-O 32-bit
    b"\xfe\xed\xfa\xcf",  # Mach-O 64-bit
    b"\xce\xfa\xed\xfe",
    b"\xcf\xfa\xed\xfe",
    b"\xca\xfe\xba\xbe",  # Mach-O universal
)


def is_placeholder(path: Path) -> bool:
    """Check whether a decoder candidate is a placeholder stand-in.

    A candidate is a placeholder if it cannot be read, is smaller than
    MIN_EXECUTABLE_SIZE bytes, or does not start with a native executable
    header.
    """
    try:
        size = path.stat().st_size
        with path.open("rb") as f:
            header = f.read(4)
    except OSError as e:
        logger.debug("Cannot read decoder candidate %s: %s", path, e)
        return True

    if size < MIN_EXECUTABLE_SIZE:
        return True

    return not any(header.startswith(magic) for magic in EXECUTABLE_MAGICS)


def _override_candidate() -> Path | None:
    raw = os.environ.get(AAPT2_ENV_VAR)
    if not raw:
        cfg_value = get_config_value(AAPT2_CONFIG_KEY)
        raw = cfg_value if isinstance(cfg_value, str) else None
    if not raw:
        return None
    return Path(raw).expanduser()


def _executable_dir() -> Path | None:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return None


def decoder_candidates() -> list[Path]:
    """Candidate decoder paths, in lookup order."""
    name = executable_name("aapt2")
    candidates: list[Path] = []

    if (override := _override_candidate()) is not None:
        candidates.append(override)

    if (exe_dir := _executable_dir()) is not None:
        candidates.append(exe_dir / "resources" / name)

    # Development checkouts
    candidates.append(Path("tools") / name)
    candidates.append(Path("resources") / name)

    if (sdk_aapt2 := get_sdk_aapt2()) is not None:
        candidates.append(sdk_aapt2)

    return candidates


def _scan() -> tuple[Path | None, list[Path]]:
    rejected: list[Path] = []
    for candidate in decoder_candidates():
        if not candidate.is_file():
            continue
        if is_placeholder(candidate):
            logger.debug("Rejecting placeholder decoder: %s", candidate)
            rejected.append(candidate)
            continue
        logger.debug("Using decoder: %s", candidate)
        return candidate, rejected
    return None, rejected


def locate_decoder() -> Path | None:
    """Find the first existing, non-placeholder aapt2 candidate."""
    found, rejected = _scan()
    if found is None:
        logger.info(
            "No usable aapt2 found (%d placeholder(s) rejected)", len(rejected)
        )
    return found


def require_decoder() -> Path:
    """Like locate_decoder, but raise when nothing usable exists.

    Raises:
        DecoderNotFoundError: If no candidate passes validation.
    """
    found, rejected = _scan()
    if found is None:
        raise DecoderNotFoundError([str(p) for p in rejected])
    return found
