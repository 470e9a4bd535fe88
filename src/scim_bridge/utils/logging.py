import logging
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback
from scim_bridge.config import settings


ROOT_LOGGER = "scim_bridge"

console = Console(stderr=True)


def setup_logging(
    level: Optional[str] = None,
    format: str = "%(message)s",
    datefmt: str = "[%X]",
) -> logging.Logger:
    """Route the ``scim_bridge`` logger hierarchy to a rich console handler.

    Only the package logger is configured, so a host application keeps its
    own root handlers. Calling this again just updates the level.
    """
    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel((level or settings.log_level).upper())

    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=settings.debug,
            show_path=settings.debug,
            enable_link_path=settings.debug,
        )
        handler.setFormatter(logging.Formatter(format, datefmt=datefmt))
        package_logger.addHandler(handler)
        install_rich_traceback(console=console, show_locals=settings.debug, suppress=[])

    # Every request is already logged by the session
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the ``scim_bridge`` hierarchy."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
