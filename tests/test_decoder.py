import sys
from pathlib import Path

import pytest

from apklens.exceptions import DecoderNotFoundError
from apklens.utils import android_sdk, decoder
from apklens.utils.decoder import (
    AAPT2_ENV_VAR,
    MIN_EXECUTABLE_SIZE,
    decoder_candidates,
    is_placeholder,
    locate_decoder,
    require_decoder,
)


def _write(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def isolated(monkeypatch, tmp_path: Path) -> Path:
    """No override, no SDK, and an executable directory under tmp_path."""
    monkeypatch.delenv(AAPT2_ENV_VAR, raising=False)
    monkeypatch.setattr(decoder, "get_config_value", lambda key, default=None: None)
    monkeypatch.setattr(decoder, "get_sdk_aapt2", lambda: None)
    monkeypatch.setattr(decoder, "executable_name", lambda tool: tool)
    monkeypatch.setattr(decoder, "_executable_dir", lambda: tmp_path / "bin")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_small_file_is_placeholder(tmp_path: Path) -> None:
    path = _write(tmp_path / "aapt2", b"\x7fELF" + b"\x00" * 10)

    assert is_placeholder(path)


def test_text_file_is_placeholder(tmp_path: Path) -> None:
    path = _write(tmp_path / "aapt2", b"#!/bin/sh\n" * 200)

    assert is_placeholder(path)


def test_real_binary_headers(tmp_path: Path) -> None:
    padding = b"\x00" * MIN_EXECUTABLE_SIZE
    elf = _write(tmp_path / "elf", b"\x7fELF" + padding)
    pe = _write(tmp_path / "pe", b"MZ" + padding)

    assert not is_placeholder(elf)
    assert not is_placeholder(pe)


def test_missing_file_is_placeholder(tmp_path: Path) -> None:
    assert is_placeholder(tmp_path / "absent")


def test_candidate_order(isolated: Path, monkeypatch) -> None:
    monkeypatch.setenv(AAPT2_ENV_VAR, str(isolated / "custom" / "aapt2"))

    candidates = decoder_candidates()

    assert candidates == [
        isolated / "custom" / "aapt2",
        isolated / "bin" / "resources" / "aapt2",
        Path("tools") / "aapt2",
        Path("resources") / "aapt2",
    ]


def test_config_override_used_when_env_unset(isolated: Path, monkeypatch) -> None:
    monkeypatch.setattr(
        decoder, "get_config_value", lambda key, default=None: "/opt/aapt2"
    )

    assert decoder_candidates()[0] == Path("/opt/aapt2")


def test_placeholder_is_skipped(isolated: Path) -> None:
    _write(isolated / "bin" / "resources" / "aapt2", b"placeholder")
    real = _write(isolated / "tools" / "aapt2", b"\x7fELF" + b"\x00" * 2000)

    found = locate_decoder()

    assert found is not None
    assert found.resolve() == real.resolve()


def test_nothing_found(isolated: Path) -> None:
    _write(isolated / "resources" / "aapt2", b"placeholder")

    assert locate_decoder() is None
    with pytest.raises(DecoderNotFoundError) as exc_info:
        require_decoder()
    assert exc_info.value.rejected == [str(Path("resources") / "aapt2")]


def test_executable_dir_frozen(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(sys, "frozen", True, raising=False)
    monkeypatch.setattr(sys, "executable", str(tmp_path / "app" / "apklens"))

    assert decoder._executable_dir() == (tmp_path / "app").resolve()


def test_sdk_aapt2_picks_newest_build_tools(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ANDROID_HOME", str(tmp_path))
    monkeypatch.setattr(android_sdk.platform, "system", lambda: "Linux")
    _write(tmp_path / "build-tools" / "30.0.3" / "aapt2", b"old")
    newest = _write(tmp_path / "build-tools" / "34.0.0" / "aapt2", b"new")
    (tmp_path / "build-tools" / "35.0.0-rc1").mkdir()
    (tmp_path / "build-tools" / "27.0.0").mkdir()

    assert android_sdk.get_sdk_aapt2() == newest
