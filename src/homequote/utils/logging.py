"""
Rich console logging shared by every module
"""
import logging
from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback
from homequote.core.config import settings

# Request handlers hold partner secrets and tokens
install_traceback(show_locals=False)

_console = Console()


def get_logger(name: str) -> logging.Logger:
    """Logger at the configured level writing through one RichHandler with markup enabled"""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level.upper()))

    if not logger.handlers:
        handler = RichHandler(
            console=_console,
            show_path=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=True,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s"))
        logger.addHandler(handler)

    # Handler is attached per logger; the root logger would print twice
    logger.propagate = False
    return logger


# Startup, shutdown and other application-wide events
app_logger = get_logger("homequote")
