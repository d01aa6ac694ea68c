"""Route log records to stderr through rich."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, quiet: bool = False) -> Console:
    """Install a RichHandler on the html2epub logger.

    Diagnostics (warnings) always show; download progress is info-level
    and hidden by ``quiet``; ``verbose`` enables debug output.

    Returns:
        The stderr console used by the handler
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    console = Console(stderr=True)
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setLevel(level)

    logger = logging.getLogger("html2epub")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return console
