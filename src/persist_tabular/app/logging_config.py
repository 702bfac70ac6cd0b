"""
Logging Configuration
=====================

One-time root logger setup for the application.
Modules log through `logging.getLogger(__name__)`; this only wires handlers.
"""

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

import colorlog


# =============================================================================
# PUBLIC INTERFACE
# =============================================================================

def setup_logging(log_file: str | None = None) -> None:
    """Configure root logging once with console + optional rotating file handler.

    Respects LOG_LEVEL env (default INFO).
    Uses colored console output for better readability.
    """
    if getattr(setup_logging, "_configured", False):
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers to avoid duplicates in reloads
    for h in list(root.handlers):
        root.removeHandler(h)

    log_format = "%(log_color)s%(asctime)s %(levelname)s %(name)s - %(message)s%(reset)s"
    datefmt = "%Y-%m-%dT%H:%M:%S%z"

    console_formatter = colorlog.ColoredFormatter(
        log_format,
        datefmt=datefmt,
        log_colors={
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'bold_red',
            'DEBUG': 'cyan',
        }
    )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(console_formatter)
    root.addHandler(console)

    # File handler without colors
    if log_file:
        file_format = "%(asctime)s %(levelname)s %(name)s - %(message)s"
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=7, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(fmt=file_format, datefmt=datefmt))
        root.addHandler(file_handler)

    # Tame noisy third-party loggers
    noisy_level = os.getenv("NOISY_LOG_LEVEL", "WARNING").upper()
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(getattr(logging, noisy_level, logging.WARNING))

    setup_logging._configured = True  # type: ignore[attr-defined]
