import logging
import logging.config
from typing import Any

from nim_proxy.config import get_settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server loggers stay at INFO even in debug mode
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _console_logger(level: str) -> dict[str, Any]:
    return {"handlers": ["console"], "level": level, "propagate": False}


def build_logging_config(debug: bool) -> dict[str, Any]:
    """
    Build the dictConfig mapping for the proxy.

    Args:
        debug: Log proxy internals (including backend request bodies) at DEBUG

    Returns:
        dict: Configuration for logging.config.dictConfig
    """
    proxy_level = "DEBUG" if debug else "INFO"

    loggers = {name: _console_logger("INFO") for name in SERVER_LOGGERS}
    # httpx logs one INFO line per backend request, which duplicates our request log
    loggers["httpx"] = _console_logger("WARNING")
    loggers["nim_proxy"] = _console_logger(proxy_level)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["console"], "level": proxy_level},
        "loggers": loggers,
    }


def setup_logging():
    """Configure the proxy, uvicorn and httpx loggers from current settings"""
    logging.config.dictConfig(build_logging_config(get_settings().DEBUG))
