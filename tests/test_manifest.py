from pathlib import Path

import pytest

from apklens.core import manifest as manifest_mod
from apklens.core.manifest import (
    STUB_MANIFEST,
    ManifestSource,
    from_binary,
    from_plain_text,
    resolve_manifest,
)
from apklens.exceptions import InvalidArchiveError, ManifestNotFoundError
from tests.conftest import SAMPLE_MANIFEST

# Start of a binary AXML chunk: RES_XML_TYPE, header size 8.
AXML_HEADER = b"\x03\x00\x08\x00"


def test_plain_text_manifest_is_returned_verbatim(make_apk) -> None:
    apk = make_apk({"AndroidManifest.xml": SAMPLE_MANIFEST})

    assert resolve_manifest(apk, use_decoder=False) == SAMPLE_MANIFEST


def test_manifest_without_prolog_is_still_text(make_apk) -> None:
    text = '<manifest package="com.example.noprolog"></manifest>'
    apk = make_apk({"AndroidManifest.xml": text})

    assert resolve_manifest(apk, use_decoder=False) == text


def test_missing_manifest_entry_is_fatal(make_apk) -> None:
    apk = make_apk({"classes.dex": b"dex"})

    with pytest.raises(ManifestNotFoundError):
        resolve_manifest(apk, use_decoder=False)


def test_not_a_zip_is_fatal(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.apk"
    bogus.write_bytes(b"nope")

    with pytest.raises(InvalidArchiveError):
        resolve_manifest(bogus, use_decoder=False)


def test_undecodable_binary_falls_back_to_stub(make_apk) -> None:
    apk = make_apk({"AndroidManifest.xml": AXML_HEADER + b"\xff\xfe\x00\x01" * 8})

    assert resolve_manifest(apk, use_decoder=False) == STUB_MANIFEST


def test_decoded_binary_manifest_is_discarded(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(manifest_mod, "_decodes_as_axml", lambda raw: True)
    source = ManifestSource(apk_path=tmp_path / "x.apk", raw=AXML_HEADER)

    assert from_binary(source) == STUB_MANIFEST


def test_plain_text_tier_rejects_non_utf8(tmp_path: Path) -> None:
    source = ManifestSource(apk_path=tmp_path / "x.apk", raw=b"\xff\xfe<manifest")

    assert from_plain_text(source) is None


def test_decoder_output_wins(monkeypatch, make_apk, tmp_path: Path) -> None:
    apk = make_apk({"AndroidManifest.xml": SAMPLE_MANIFEST})
    decoder = tmp_path / "aapt2"
    calls = []

    def fake_dump(decoder_path, apk_path):
        calls.append((decoder_path, apk_path))
        return "E: manifest\n  A: package=\"com.from.decoder\"\n"

    monkeypatch.setattr(manifest_mod, "dump_xmltree", fake_dump)

    text = resolve_manifest(apk, decoder)

    assert "com.from.decoder" in text
    assert calls == [(decoder, apk)]


def test_failed_decoder_falls_through_to_text(monkeypatch, make_apk, tmp_path) -> None:
    apk = make_apk({"AndroidManifest.xml": SAMPLE_MANIFEST})
    monkeypatch.setattr(manifest_mod, "dump_xmltree", lambda d, a: None)

    assert resolve_manifest(apk, tmp_path / "aapt2") == SAMPLE_MANIFEST


def test_use_decoder_false_skips_lookup(monkeypatch, make_apk) -> None:
    apk = make_apk({"AndroidManifest.xml": SAMPLE_MANIFEST})

    def boom():
        raise AssertionError("decoder lookup should not happen")

    monkeypatch.setattr(manifest_mod, "locate_decoder", boom)

    assert resolve_manifest(apk, use_decoder=False) == SAMPLE_MANIFEST
