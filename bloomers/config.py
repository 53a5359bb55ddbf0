"""Configuration for the bloomers spell checker."""

import logging
import os
import sys
from dataclasses import dataclass

import structlog
from dotenv import load_dotenv

DEFAULT_FALSE_POSITIVE_RATE = 0.01
DEFAULT_FILTER_PATH = "words.bf"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Settings loaded from environment variables."""

    false_positive_rate: float
    filter_path: str
    log_level: str


def load_settings() -> Settings:
    """
    Load settings from environment variables (and a local .env file).

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If a variable holds an invalid value
    """
    load_dotenv()

    try:
        false_positive_rate = float(
            os.getenv("BLOOMERS_FALSE_POSITIVE_RATE", str(DEFAULT_FALSE_POSITIVE_RATE))
        )
    except ValueError as exc:
        raise ValueError(
            "BLOOMERS_FALSE_POSITIVE_RATE must be a valid number. Check your .env file."
        ) from exc
    if not 0.0 <= false_positive_rate <= 1.0:
        raise ValueError("BLOOMERS_FALSE_POSITIVE_RATE must be between 0.0 and 1.0.")

    filter_path = os.getenv("BLOOMERS_FILTER_PATH", DEFAULT_FILTER_PATH).strip()
    if not filter_path:
        raise ValueError("BLOOMERS_FILTER_PATH must not be empty.")

    log_level = os.getenv("BLOOMERS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"BLOOMERS_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}.")

    return Settings(
        false_positive_rate=false_positive_rate,
        filter_path=filter_path,
        log_level=log_level,
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Send structlog output to stderr, dropping events below ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
