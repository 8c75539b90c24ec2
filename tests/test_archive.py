from pathlib import Path

import pytest

from apklens.core.archive import ApkArchive
from apklens.exceptions import ApkReadError, InvalidArchiveError
from tests.conftest import write_corrupt_deflated


def test_lookup_and_scan(make_apk) -> None:
    apk = make_apk({"a/one.txt": "1", "b/two.png": b"2", "c/three.png": b"3"})

    with ApkArchive(apk) as archive:
        assert archive.entry_count == 3
        assert archive.has("a/one.txt")
        assert not archive.has("missing")
        assert archive.read("a/one.txt") == b"1"
        assert archive.read("missing") is None
        found = [info.filename for info in archive.scan(lambda n: n.endswith(".png"))]

    assert found == ["b/two.png", "c/three.png"]


def test_not_a_zip(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.apk"
    bogus.write_bytes(b"definitely not a zip")

    with pytest.raises(InvalidArchiveError):
        ApkArchive(bogus)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ApkReadError):
        ApkArchive(tmp_path / "absent.apk")


def test_corrupt_deflate_stream_reads_as_missing(tmp_path: Path) -> None:
    apk = write_corrupt_deflated(tmp_path / "corrupt.apk", "META-INF/CERT.RSA")

    with ApkArchive(apk) as archive:
        assert archive.has("META-INF/CERT.RSA")
        assert archive.read("META-INF/CERT.RSA") is None
