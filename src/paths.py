"""Centralized path configuration for the application."""

import os
from pathlib import Path

def get_data_root() -> Path:
    """
    Get the root directory for generated files (structure artifacts, caches, reports).

    Respects the TABLEMAP_DATA_DIR environment variable.
    If not set, defaults to the current working directory.
    """
    env_path = os.getenv("TABLEMAP_DATA_DIR")
    if env_path:
        return Path(env_path)
    return Path(".")

def get_output_root() -> Path:
    """Get the root directory for structure artifacts and reports."""
    return get_data_root() / "output"

def get_cache_root() -> Path:
    """Get the root directory for the resource type mapping cache."""
    return get_data_root() / ".cache"

def get_config_file() -> Path:
    """Get the path to the project configuration file."""
    return Path("config/tablemap.yaml")
