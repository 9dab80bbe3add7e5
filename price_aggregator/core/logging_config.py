"""
Logging configuration for Crypto Price Aggregator Service.
Supports both JSON and text logging formats.
"""

import logging
import logging.config
import sys
from typing import Dict, Any, Optional
from pythonjsonlogger.json import JsonFormatter

from .config import Settings, settings as default_settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: Optional[Settings] = None) -> None:
    """Setup structured logging for the application."""
    config = config or default_settings

    if config.log_format == "json":
        logging_config = get_json_logging_config(config.log_level)
    else:
        logging_config = get_text_logging_config(config.log_level)

    logging.config.dictConfig(logging_config)
    logging.getLogger().setLevel(getattr(logging, config.log_level))

    # Upstream HTTP client chatter
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _build_config(formatters: Dict[str, Any], formatter: str, log_level: str) -> Dict[str, Any]:
    """Wrap formatters in a dictConfig with one stdout handler shared by root and app loggers."""
    logger_config = {"handlers": ["console"], "level": log_level, "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": formatter,
                "stream": sys.stdout
            }
        },
        "loggers": {
            "": dict(logger_config),
            "app": dict(logger_config)
        }
    }


def get_json_logging_config(log_level: str) -> Dict[str, Any]:
    """Get JSON logging configuration."""
    formatters = {
        "json": {
            "()": JsonFormatter,
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(module)s %(funcName)s %(lineno)d",
            "datefmt": DATE_FORMAT
        }
    }
    return _build_config(formatters, "json", log_level)


def get_text_logging_config(log_level: str) -> Dict[str, Any]:
    """Get text logging configuration."""
    formatters = {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s (%(filename)s:%(lineno)d)",
            "datefmt": DATE_FORMAT
        },
        "detailed": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s [in %(pathname)s:%(lineno)d]",
            "datefmt": DATE_FORMAT
        }
    }
    formatter = "standard" if log_level == "INFO" else "detailed"
    return _build_config(formatters, formatter, log_level)


def create_logger(module_name: str) -> logging.Logger:
    """Create a logger namespaced under ``app`` for a specific module."""
    return logging.getLogger(f"app.{module_name}")
