"""Logging setup for the CLI. Library modules only call logging.getLogger(__name__)."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


_HANDLER_NAME = "revgate-cli"


def configure_logging(verbose: bool = False) -> None:
    """Attach a rich stderr handler to the `revgate` logger (idempotent)."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("revgate")
    logger.setLevel(level)

    for handler in logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level)
            return

    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
