#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the region extraction pipeline.

This module centralizes all configuration parameters used across the decode,
scaling and encoding modules, making it easier to modify settings in one place.
"""
from typing import Dict, List, Tuple, Any, Optional
import copy
import logging
from pathlib import Path

import yaml

# Input configuration
STDIN_PATH: str = "/dev/stdin"
STDIN_ALIASES: Tuple[str, ...] = (STDIN_PATH, "-")
TEMP_PREFIX: str = "tmp"
TEMP_SUFFIX: str = ".jp2"
COPY_BUFFER_SIZE: int = 1024 * 1024

# Scaling configuration
MAX_SCALING_FACTOR: float = 3.0  # Exclusive upper bound
MAX_UPSCALE_RATIO: int = 3       # Requested size >= ratio * source size is ignored

# Path configuration
DEFAULT_OUTPUT_DIR: Path = Path.cwd() / "output"

# Format configuration: identifier -> format tag
DEFAULT_FORMAT_TABLE: Dict[str, str] = {
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "jp2": "jp2",
    "png": "png",
    "tiff": "tiff",
    "tif": "tiff",
}

# Writer defaults, keyed by format tag
WRITER_CONFIG: Dict[str, Dict[str, Any]] = {
    "jpeg": {
        "quality": 95,
    },
    "jp2": {
        "reversible": "YES",  # Lossless unless a quality is requested
    },
    "png": {
        "zlevel": 6,
    },
    "tiff": {
        "compress": "LZW",
    },
}

# Batch configuration
BATCH_CONFIG: Dict[str, Any] = {
    "required_columns": ["input", "output", "format"],
    "optional_columns": ["region", "level", "scale", "size"],
    "stop_on_error": False,
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "extraction.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

CONFIG_SECTIONS: List[str] = ["formats", "writers", "logging"]


def default_config() -> Dict[str, Any]:
    """
    Return a fresh copy of the built-in configuration.

    Returns
    -------
    dict
        Dictionary with 'formats', 'writers' and 'logging' sections.
    """
    return {
        "formats": dict(DEFAULT_FORMAT_TABLE),
        "writers": copy.deepcopy(WRITER_CONFIG),
        "logging": dict(LOGGING_CONFIG),
    }


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a YAML configuration file on top of the built-in defaults.

    Parameters
    ----------
    path : str, optional
        Path to a YAML file. If None, the defaults are returned.

    Returns
    -------
    dict
        Merged configuration.

    Notes
    -----
    A ``formats`` section replaces the default format table entirely, so a
    deployment can drop formats as well as add synonyms. ``writers`` and
    ``logging`` entries are merged key by key.
    """
    config = default_config()
    if path is None:
        return config

    # logging_config imports this module, so take the logger by name
    logger = logging.getLogger("region_extract.core.config")

    with open(path, "r") as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    for section in loaded:
        if section not in CONFIG_SECTIONS:
            logger.warning(f"Ignoring unknown configuration section: {section}")

    if loaded.get("formats"):
        config["formats"] = {str(k).lower(): str(v).lower() for k, v in loaded["formats"].items()}

    for tag, options in (loaded.get("writers") or {}).items():
        config["writers"].setdefault(str(tag).lower(), {}).update(options or {})

    config["logging"].update(loaded.get("logging") or {})

    return config
