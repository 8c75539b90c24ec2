from pathlib import Path

from apklens.core.parser import parse_apk
from apklens.core.report import render_html_report
from apklens.models.apk import (
    AnalysisResult,
    ExtractionSource,
    PackageRecord,
    PermissionEntry,
)


def test_report_sections(sample_apk: Path) -> None:
    html = render_html_report(parse_apk(sample_apk))

    assert html.startswith("<!DOCTYPE html>")
    assert "com.example.app" in html
    assert "data:image/png;base64," in html
    assert "android.permission.CAMERA" in html
    assert "Debuggable" in html
    assert "Not expired" in html


def test_report_escapes_text() -> None:
    result = AnalysisResult(
        apk_path=Path("evil.apk"),
        source=ExtractionSource.INTERNAL,
        package=PackageRecord(
            package_name="<script>alert(1)</script>",
            version_name="1",
            version_code="1",
            min_sdk="1",
            target_sdk="1",
        ),
    )

    html = render_html_report(result)

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html
    assert "Security" not in html


def test_report_lists_protection_level() -> None:
    result = AnalysisResult(
        apk_path=Path("a.apk"),
        source=ExtractionSource.INTERNAL,
        package=PackageRecord(
            package_name="com.example.app",
            version_name="1",
            version_code="1",
            min_sdk="1",
            target_sdk="1",
        ),
        permissions=[
            PermissionEntry(
                name="com.example.permission.SYNC", protection_level="signature"
            )
        ],
    )

    html = render_html_report(result)

    assert "<td>signature</td>" in html
    assert "<h2>Permissions (0)</h2>" in html
