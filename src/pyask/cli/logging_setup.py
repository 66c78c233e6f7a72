"""Logging configuration for the CLI.

Centralizes the logging setup and exposes setup_logging(), used by every
command. Records go to stderr through rich's RichHandler so they never mix
with the chat output on stdout. The Textual app uses no console handler
and routes records into its log panel instead.
"""

import copy
import logging
import logging.config
import os
import warnings
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"


def stderr_rich_handler(**kwargs: Any) -> RichHandler:
    """RichHandler bound to a stderr console (dictConfig factory)."""
    return RichHandler(console=Console(stderr=True), **kwargs)


DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "rich": {"format": "%(message)s", "datefmt": "%H:%M:%S"},
    },
    "handlers": {
        "rich": {
            "()": "pyask.cli.logging_setup.stderr_rich_handler",
            "formatter": "rich",
            "show_path": False,
            "rich_tracebacks": True,
            "markup": False,
        },
        "null": {"class": "logging.NullHandler"},
    },
    "loggers": {
        "pyask": {"level": DEFAULT_LOG_LEVEL},
        # Request lines of the HTTP stack are noise at any level we use
        "httpx": {"level": "WARNING"},
        "httpcore": {"level": "WARNING"},
    },
    "root": {"handlers": ["rich"], "level": DEFAULT_LOG_LEVEL},
}


def merge_dicts(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into *base* and return *base*."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            merge_dicts(base[key], value)
        else:
            base[key] = value
    return base


def resolve_level(level: str | None) -> str:
    """Pick the level from the argument, then LOG_LEVEL, then the default.

    Unknown names fall back to the default with a warning.
    """
    chosen = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if chosen not in LOG_LEVELS:
        warnings.warn(f"Unknown log level '{chosen}'; using {DEFAULT_LOG_LEVEL}.")
        return DEFAULT_LOG_LEVEL
    return chosen


def setup_logging(
    level: str | None = None,
    *,
    console: bool = True,
    config_overrides: dict[str, Any] | None = None,
) -> None:
    """Configure logging for a CLI command.

    Args:
        level: Level of the ``pyask`` loggers (default: LOG_LEVEL or WARNING)
        console: Attach the stderr RichHandler; False for full-screen UIs
        config_overrides: dictConfig fragments merged over the defaults
    """
    config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)
    config["loggers"]["pyask"]["level"] = resolve_level(level)
    if not console:
        config["root"]["handlers"] = ["null"]
    if config_overrides:
        merge_dicts(config, config_overrides)
    logging.config.dictConfig(config)
