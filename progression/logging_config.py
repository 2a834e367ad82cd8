"""Logging setup for host applications that embed the progression engine.

The engine itself only calls ``logging.getLogger(__name__)``; hosts call
``configure_logging`` once at start-up to get a stream handler and to control
how chatty the ``progression`` loggers are independently of everything else.
"""

from logging.config import dictConfig
from typing import Optional

from .config import get_settings

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
PACKAGE_LOGGER = "progression"


def configure_logging(level: Optional[str] = None, *, root_level: str = "WARNING") -> None:
    """Attach a stream handler to the root logger and set the package level.

    ``level`` applies to ``progression.*`` loggers and falls back to
    ``PROGRESSION_LOG_LEVEL``; ``root_level`` applies to every other logger.
    """
    package_level = (level or get_settings().log_level).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                PACKAGE_LOGGER: {
                    "level": package_level,
                    "propagate": True,
                },
            },
            "root": {
                "handlers": ["default"],
                "level": root_level.upper(),
            },
        }
    )


__all__ = ["DEFAULT_LOG_FORMAT", "PACKAGE_LOGGER", "configure_logging"]
