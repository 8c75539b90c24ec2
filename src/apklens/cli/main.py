"""Root CLI application for apklens."""

import typer

from apklens import __version__
from apklens.cli import analyze, decoder, extract
from apklens.utils.log import configure_logging

app = typer.Typer(
    name="apklens",
    help="Inspect Android APK metadata without running the app.",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(analyze.app, name="analyze", help="Summarize an APK")
app.add_typer(extract.app, name="extract", help="Pull the manifest or icon out")
app.add_typer(decoder.app, name="decoder", help="Inspect the aapt2 lookup")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"apklens {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable debug logging on stderr.",
    ),
) -> None:
    """apklens - static APK metadata extraction."""
    configure_logging(verbose)


if __name__ == "__main__":
    app()
