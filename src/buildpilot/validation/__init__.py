"""
Validation and error handling for the buildpilot package.

This module provides the exception taxonomy, input validation helpers and
error handling with consistent error reporting across the application.
"""

from .exceptions import (
    BuildError,
    ClassFileFormatError,
    ConfigurationError,
    ErrorSeverity,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_file_error,
    handle_subprocess_error,
)

from .validators import (
    validate_boolean,
    validate_enum_choice,
    validate_optional_string,
    validate_path_exists,
    validate_positive_integer,
    validate_string_list,
)

__all__ = [
    # Exceptions
    "BuildError",
    "ClassFileFormatError",
    "ConfigurationError",
    "ErrorSeverity",
    "ValidationError",
    # Error handling
    "handle_error",
    "handle_config_error",
    "handle_file_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "validate_boolean",
    "validate_enum_choice",
    "validate_optional_string",
    "validate_path_exists",
    "validate_positive_integer",
    "validate_string_list",
]
