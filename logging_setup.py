"""Logging configuration shared by the CLI and the pipeline.

Log records go through a RichHandler bound to the same console the CLI prints
to, so progress messages and warnings interleave cleanly.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "auto_docker"


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Install a RichHandler on the root logger and return the session logger.

    Args:
        verbose: Log at DEBUG instead of WARNING
        console: Console to render into (defaults to a stderr console)

    Returns:
        The "auto_docker" session logger
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=verbose,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # SDK transports are chatty at DEBUG
    for noisy in ("httpx", "httpcore", "openai", "LiteLLM", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return logging.getLogger(LOGGER_NAME)
