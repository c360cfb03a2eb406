import logging
from logging.config import dictConfig

from .config import settings


def setup_logging(level=None) -> None:
    """Configure the root logger."""
    level = level or settings.log_level
    level = getattr(logging, level.upper(), logging.INFO)

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "level": level,
            }
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }

    dictConfig(config)


__all__ = ["setup_logging"]
