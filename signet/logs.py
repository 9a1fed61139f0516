"""
Logging setup for applications embedding signet.

The library itself only emits records through module loggers
(logging.getLogger(__name__)) and installs a NullHandler on the "signet"
logger, so it stays silent until the host configures logging. setup_logging()
is the optional one-liner to get readable, rich-rendered records.

Environment
- SIGNET_LOG_LEVEL: default level name (INFO when unset).
- NO_COLOR: when set, records are rendered without colors.
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(name="signet", *, level=None):
    """
    attach a RichHandler to logger `name` and return the logger.

    - the level comes from `level`, else SIGNET_LOG_LEVEL, else INFO.
    - calling it again never stacks handlers; it only updates the level.
    """
    level = getattr(logging, (level or os.getenv("SIGNET_LOG_LEVEL", "INFO")).upper(), logging.INFO)

    logger = logging.getLogger(name)
    if any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.setLevel(level)
        return logger

    handler = RichHandler(
        console=Console(stderr=True, no_color=os.getenv("NO_COLOR") is not None),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = ("setup_logging",)
