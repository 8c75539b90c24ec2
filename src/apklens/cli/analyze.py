"""CLI commands for APK analysis."""

from pathlib import Path

import typer
from rich.table import Table

from apklens.cli.common import (
    APK_ARGUMENT,
    JSON_OPTION,
    NO_DECODER_OPTION,
    resolve_input,
)
from apklens.core.archive import ApkArchive
from apklens.core.hashing import build_file_info
from apklens.core.parser import ApkParser
from apklens.core.report import render_html_report
from apklens.core.signature import extract_signature
from apklens.exceptions import ApkLensError
from apklens.models.apk import AnalysisResult, SignatureRecord
from apklens.utils.apk import validate_apk_path
from apklens.utils.output import console
from apklens.utils.tempfiles import TempFileRegistry

app = typer.Typer(no_args_is_help=True)


def _print_signature(signature: SignatureRecord) -> None:
    console.print_fields(
        "Signature",
        [
            ("Issuer", signature.issuer),
            ("Subject", signature.subject),
            ("Valid from", signature.valid_from),
            ("Valid to", signature.valid_to),
            ("Expired", "yes" if signature.is_expired else "no"),
            ("SHA-1", signature.fingerprint_sha1),
            ("SHA-256", signature.fingerprint_sha256),
        ],
    )


def _print_permissions(result: AnalysisResult, dangerous_only: bool) -> None:
    permissions = [
        p for p in result.permissions if p.is_dangerous or not dangerous_only
    ]
    analysis = result.permission_analysis

    table = Table(
        title=(
            f"Permissions ({analysis.total_permissions}, "
            f"{analysis.dangerous_permissions} dangerous, "
            f"risk {analysis.risk_level.value})"
        ),
        title_justify="left",
    )
    table.add_column("Permission", style="cyan")
    table.add_column("Dangerous")
    table.add_column("Protection", style="dim")
    for permission in permissions:
        flag = "[red]yes[/red]" if permission.is_dangerous else "no"
        table.add_row(permission.name, flag, permission.protection_level or "-")
    console.print(table)


def _print_result(result: AnalysisResult) -> None:
    package = result.package
    console.print_fields(
        "Package",
        [
            ("Package", package.package_name),
            ("Version", package.formatted_version_info),
            ("SDK", package.formatted_sdk_info),
            ("Main activity", package.main_activity),
            ("Icon", "found" if result.icon_base64 else None),
            ("Source", result.source.value),
        ],
    )

    if result.file_info is not None:
        info = result.file_info
        console.print_fields(
            "File",
            [
                ("Size", f"{info.file_size} bytes"),
                ("Entries", info.entry_count),
                ("MD5", info.md5),
                ("SHA-1", info.sha1),
                ("SHA-256", info.sha256),
            ],
        )

    if result.signature is not None:
        _print_signature(result.signature)

    _print_permissions(result, dangerous_only=False)

    if result.security is not None:
        console.print_fields(
            "Security",
            list(result.security.model_dump().items()),
        )


@app.command("info")
def info(
    apk_path: Path = APK_ARGUMENT,
    no_icon: bool = typer.Option(
        False,
        "--no-icon",
        help="Skip launcher icon lookup.",
    ),
    no_decoder: bool = NO_DECODER_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """Extract package, permission, signature, hash and security facts."""
    console.set_json_mode(json_output)

    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            result = ApkParser(
                path, use_decoder=not no_decoder, include_icon=not no_icon
            ).parse()
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if json_output:
        console.emit_json(result.model_dump(mode="json"))
        return

    _print_result(result)


@app.command("permissions")
def permissions(
    apk_path: Path = APK_ARGUMENT,
    dangerous_only: bool = typer.Option(
        False,
        "--dangerous-only",
        "-d",
        help="Only list permissions classified as dangerous.",
    ),
    no_decoder: bool = NO_DECODER_OPTION,
    json_output: bool = JSON_OPTION,
) -> None:
    """List requested permissions and their classification."""
    console.set_json_mode(json_output)

    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            result = ApkParser(
                path, use_decoder=not no_decoder, include_icon=False
            ).parse()
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if json_output:
        entries = [
            p.model_dump(mode="json", exclude_none=True)
            for p in result.permissions
            if p.is_dangerous or not dangerous_only
        ]
        console.emit_json(
            {
                "permissions": entries,
                "analysis": result.permission_analysis.model_dump(mode="json"),
            }
        )
        return

    if not result.permissions:
        console.print_warning("No permissions found")
        return

    _print_permissions(result, dangerous_only)


@app.command("signature")
def signature(
    apk_path: Path = APK_ARGUMENT,
    json_output: bool = JSON_OPTION,
) -> None:
    """Show the signing certificate summary from META-INF."""
    console.set_json_mode(json_output)

    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            validate_apk_path(path)
            record = extract_signature(path)
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if json_output:
        console.emit_json(record.model_dump(mode="json"))
        return

    _print_signature(record)


@app.command("hashes")
def hashes(
    apk_path: Path = APK_ARGUMENT,
    json_output: bool = JSON_OPTION,
) -> None:
    """Compute MD5, SHA-1 and SHA-256 of the APK file."""
    console.set_json_mode(json_output)

    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            validate_apk_path(path)
            with ApkArchive(path) as archive:
                entry_count = archive.entry_count
            file_info = build_file_info(path, entry_count)
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if json_output:
        console.emit_json(file_info.model_dump(mode="json"))
        return

    console.print_fields(
        "File",
        [
            ("Size", f"{file_info.file_size} bytes"),
            ("Entries", file_info.entry_count),
            ("MD5", file_info.md5),
            ("SHA-1", file_info.sha1),
            ("SHA-256", file_info.sha256),
        ],
    )


@app.command("report")
def report(
    apk_path: Path = APK_ARGUMENT,
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Where to write the HTML report.",
        dir_okay=False,
    ),
    no_decoder: bool = NO_DECODER_OPTION,
) -> None:
    """Write a standalone HTML report."""
    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            result = ApkParser(path, use_decoder=not no_decoder).parse()
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    try:
        output.write_text(render_html_report(result), encoding="utf-8")
    except OSError as e:
        console.print_error(f"Failed to write report: {e}")
        raise typer.Exit(1) from None

    console.print_success(f"Report written to {output}")
