from .logging import ROOT_LOGGER, get_logger, setup_logging, console

__all__ = [
    "ROOT_LOGGER",
    "get_logger",
    "setup_logging",
    "console",
]
