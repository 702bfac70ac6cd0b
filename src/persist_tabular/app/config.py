"""
Application Configuration
=========================

Central configuration for the API.
"""

import os
from pathlib import Path


# =============================================================================
# VERSION
# =============================================================================

VERSION = "1.0.0"
APP_NAME = "Persist Tabular"


# =============================================================================
# OUTPUT DIRECTORY
# =============================================================================

# Default output directory (can be overridden via environment variable)
OUTPUT_DIR = os.environ.get(
    "PTX_OUTPUT_DIR",
    str(Path(__file__).parent.parent.parent.parent / "output")
)


def get_output_dir() -> str:
    """
    Get the output directory path, creating it if it doesn't exist.

    Returns:
        Absolute path to output directory.
    """
    output_path = Path(OUTPUT_DIR)
    output_path.mkdir(parents=True, exist_ok=True)
    return str(output_path.resolve())


# =============================================================================
# ID NAMESPACE
# =============================================================================

# Root of the id hierarchy when a request names no parent namespace.
# Changing it changes every id derived from it.
DEFAULT_PARENT_NAMESPACE = os.environ.get(
    "PTX_PARENT_NAMESPACE",
    "0b4ae0b2-6f1c-5c59-9a4e-3c0d2d6b7f10"
)


# =============================================================================
# LOGGING
# =============================================================================

LOG_FILE = os.environ.get("PTX_LOG_FILE") or None
