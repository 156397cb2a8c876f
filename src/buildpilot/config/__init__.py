"""
Configuration management for the buildpilot package.

This module provides a clean interface for loading, validating, and accessing
configuration data from TOML files with singleton pattern management.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    load_build_config,
    load_project_model_file,
    load_toml_file,
)
from .validators import (
    validate_app_config,
    validate_build_options,
    validate_dependency_installer,
    validate_publication_policy,
    validate_testing_options,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_build_config",
    "load_project_model_file",
    "validate_app_config",
    "validate_build_options",
    "validate_testing_options",
    "validate_publication_policy",
    "validate_dependency_installer",
]
