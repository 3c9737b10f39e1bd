"""Console logging for the command-line tool."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Route the package's log records to a rich console handler.

    Args:
        verbose: Enable debug output, including Pandoc's diagnostics.

    Returns:
        The package logger.
    """
    logger = logging.getLogger("scstg")
    logger.handlers.clear()
    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
