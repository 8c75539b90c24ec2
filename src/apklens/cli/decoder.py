"""CLI commands for the external aapt2 decoder."""

import typer

from apklens.exceptions import DecoderNotFoundError
from apklens.utils.decoder import decoder_candidates, is_placeholder, require_decoder
from apklens.utils.output import console

app = typer.Typer(no_args_is_help=True)


@app.command("which")
def which(
    show_candidates: bool = typer.Option(
        False,
        "--candidates",
        "-c",
        help="List every lookup location and its status.",
    ),
) -> None:
    """Show which aapt2 binary will be used."""
    if show_candidates:
        for candidate in decoder_candidates():
            if not candidate.is_file():
                status = "[dim]missing[/dim]"
            elif is_placeholder(candidate):
                status = "[yellow]placeholder[/yellow]"
            else:
                status = "[green]ok[/green]"
            console.print(f"  {status} {candidate}")

    try:
        decoder = require_decoder()
    except DecoderNotFoundError as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    typer.echo(str(decoder))
