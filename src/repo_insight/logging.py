"""Logging setup for repo-insight.

Library modules only ask for a logger; the CLI decides where records go.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "repo_insight"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the repo_insight hierarchy."""
    if name and not name.startswith(_LOGGER_NAME):
        name = f"{_LOGGER_NAME}.{name}"
    return logging.getLogger(name or _LOGGER_NAME)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send repo_insight records to stderr through rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Drop handlers from a previous invocation in the same process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger


__all__ = ["configure_logging", "get_logger"]
