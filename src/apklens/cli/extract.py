"""CLI commands that pull raw artifacts out of an APK."""

import base64
from pathlib import Path

import typer

from apklens.cli.common import APK_ARGUMENT, NO_DECODER_OPTION, resolve_input
from apklens.core.icon import resolve_icon
from apklens.core.manifest import resolve_manifest
from apklens.exceptions import ApkLensError
from apklens.utils.apk import validate_apk_path
from apklens.utils.output import console
from apklens.utils.tempfiles import TempFileRegistry

app = typer.Typer(no_args_is_help=True)


@app.command("manifest")
def manifest(
    apk_path: Path = APK_ARGUMENT,
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the manifest text to a file instead of stdout.",
        dir_okay=False,
    ),
    no_decoder: bool = NO_DECODER_OPTION,
) -> None:
    """Print AndroidManifest.xml as text (decoded where possible)."""
    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            validate_apk_path(path)
            text = resolve_manifest(path, use_decoder=not no_decoder)
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if output is None:
        typer.echo(text)
        return

    try:
        output.write_text(text, encoding="utf-8")
    except OSError as e:
        console.print_error(f"Failed to write manifest: {e}")
        raise typer.Exit(1) from None
    console.print_success(f"Manifest written to {output}")


@app.command("icon")
def icon(
    apk_path: Path = APK_ARGUMENT,
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Where to write the icon bytes.",
        dir_okay=False,
    ),
    no_decoder: bool = NO_DECODER_OPTION,
) -> None:
    """Save the launcher icon image."""
    try:
        with TempFileRegistry() as registry:
            path = resolve_input(apk_path, registry)
            validate_apk_path(path)
            manifest_text = resolve_manifest(path, use_decoder=not no_decoder)
            encoded = resolve_icon(path, manifest_text)
    except ApkLensError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if encoded is None:
        console.print_warning("No application icon found")
        raise typer.Exit(1)

    try:
        output.write_bytes(base64.b64decode(encoded))
    except OSError as e:
        console.print_error(f"Failed to write icon: {e}")
        raise typer.Exit(1) from None
    console.print_success(f"Icon written to {output}")
