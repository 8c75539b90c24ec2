"""Shared fixtures: APK-shaped ZIP archives and test certificates."""

import zipfile
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

SAMPLE_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="com.example.app"
    android:versionCode="7"
    android:versionName="2.3">
    <uses-sdk android:minSdkVersion="21" android:targetSdkVersion="34" />
    <uses-permission android:name="android.permission.INTERNET" />
    <uses-permission android:name="android.permission.CAMERA" />
    <uses-permission android:name="android.permission.READ_SMS" />
    <application android:icon="@mipmap/ic_custom" android:debuggable="true"
        android:allowBackup="false">
        <activity android:name=".SettingsActivity" />
        <activity android:name="MainActivity" android:exported="true">
            <intent-filter>
                <action android:name="android.intent.action.MAIN" />
                <category android:name="android.intent.category.LAUNCHER" />
            </intent-filter>
        </activity>
    </application>
</manifest>
"""

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

ApkFactory = Callable[..., Path]


def write_corrupt_deflated(path: Path, entry: str) -> Path:
    """Write a ZIP whose single deflated entry has damaged compressed bytes."""
    payload = PNG_BYTES + bytes(range(256)) * 64
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(entry, payload)
    with zipfile.ZipFile(path) as zf:
        info = zf.getinfo(entry)

    raw = bytearray(path.read_bytes())
    header = info.header_offset
    name_len = int.from_bytes(raw[header + 26 : header + 28], "little")
    extra_len = int.from_bytes(raw[header + 28 : header + 30], "little")
    start = header + 30 + name_len + extra_len
    for i in range(start + 2, start + info.compress_size - 2):
        raw[i] ^= 0x5A
    path.write_bytes(bytes(raw))
    return path


@pytest.fixture
def make_apk(tmp_path: Path) -> ApkFactory:
    """Build a ZIP file from a name -> content mapping."""

    def _make(entries: dict[str, bytes | str], name: str = "app.apk") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for entry, content in entries.items():
                data = content.encode("utf-8") if isinstance(content, str) else content
                zf.writestr(entry, data)
        return path

    return _make


@pytest.fixture
def sample_apk(make_apk: ApkFactory) -> Path:
    return make_apk(
        {
            "AndroidManifest.xml": SAMPLE_MANIFEST,
            "classes.dex": b"dex\n035\x00",
            "res/mipmap-hdpi/ic_launcher.png": PNG_BYTES,
            "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\r\nCreated-By: 1.0 (Android)\r\n",
        }
    )


@pytest.fixture(scope="session")
def certificate() -> x509.Certificate:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, "Example Signer"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Org"),
        ]
    )
    not_before = datetime(2020, 1, 1, tzinfo=timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(1234)
        .not_valid_before(not_before)
        .not_valid_after(not_before + timedelta(days=365 * 30))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def certificate_der(certificate: x509.Certificate) -> bytes:
    return certificate.public_bytes(serialization.Encoding.DER)


@pytest.fixture(autouse=True)
def no_decoder(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of any aapt2 installed on the machine."""
    monkeypatch.setattr("apklens.core.parser.locate_decoder", lambda: None)
    monkeypatch.setattr("apklens.core.manifest.locate_decoder", lambda: None)
