"""
App Module
==========

Configuration, logging and error mapping for the FastAPI application.
"""

from .config import (
    VERSION,
    APP_NAME,
    OUTPUT_DIR,
    DEFAULT_PARENT_NAMESPACE,
    get_output_dir,
)
from .exceptions import EXCEPTION_MAP, get_http_exception, global_exception_handler
from .logging_config import setup_logging

__all__ = [
    "VERSION",
    "APP_NAME",
    "OUTPUT_DIR",
    "DEFAULT_PARENT_NAMESPACE",
    "get_output_dir",
    "EXCEPTION_MAP",
    "get_http_exception",
    "global_exception_handler",
    "setup_logging",
]
