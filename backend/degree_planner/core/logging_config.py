"""
Logging setup for the Degree Planner
"""
import logging
from typing import Optional

from .config import BaseSettings, get_settings


def configure_logging(settings: Optional[BaseSettings] = None) -> None:
    """Configure the root logger from settings"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )

    # The driver is chatty at DEBUG
    logging.getLogger("neo4j").setLevel(logging.WARNING)


def get_component_logger(
    name: str, logger: Optional[logging.Logger] = None
) -> logging.Logger:
    """Return the injected logger, or the module logger for ``name``"""
    return logger if logger is not None else logging.getLogger(name)
