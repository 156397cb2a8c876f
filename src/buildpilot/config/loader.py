"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of TOML files: the
orchestrator's own `build.toml` and the project model description.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import handle_config_error, ErrorSeverity

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_build_config(config_path: Path) -> Dict[str, Any]:
    """
    Load the orchestrator configuration file (build.toml).

    Args:
        config_path: Path to the build.toml file

    Returns:
        Parsed configuration data
    """
    return load_toml_file(config_path, "build configuration file")


def load_project_model_file(model_path: Path) -> Dict[str, Any]:
    """
    Load the project model description (.idea/project-model.toml).

    Args:
        model_path: Path to the project model file

    Returns:
        Parsed project model data
    """
    return load_toml_file(model_path, "project model file")
