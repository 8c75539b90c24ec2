"""Logging setup for the command line."""

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through rich on stderr.

    Args:
        verbose: If True, log at DEBUG; otherwise only warnings and errors.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=RichConsole(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # pyaxmlparser logs every malformed chunk at ERROR
    logging.getLogger("pyaxmlparser").setLevel(
        logging.DEBUG if verbose else logging.CRITICAL
    )
