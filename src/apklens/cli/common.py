"""Shared CLI arguments and input handling."""

from pathlib import Path

import typer

from apklens.utils.tempfiles import TempFileRegistry

STDIN_MARKER = "-"

APK_ARGUMENT = typer.Argument(
    ...,
    help="Path to the APK file, or '-' to read it from stdin.",
    dir_okay=False,
)

JSON_OPTION = typer.Option(
    False,
    "--json",
    "-j",
    help="Output as JSON.",
)

NO_DECODER_OPTION = typer.Option(
    False,
    "--no-decoder",
    help="Never invoke aapt2; use the internal parser only.",
)


def resolve_input(apk_path: Path, registry: TempFileRegistry) -> Path:
    """Return a real file path for the APK argument.

    A '-' argument is spooled from stdin into a file owned by ``registry``.
    """
    if str(apk_path) == STDIN_MARKER:
        stream = typer.get_binary_stream("stdin")
        return registry.spool(stream, suffix=".apk")
    return apk_path
