"""
Compilation context for the buildpilot package.

- Ordered option reconciliation rules
- Module output directories and legacy module name redirection
- Recursive runtime classpaths
"""

from .classpath import OutputResolver, TestClasspathBuilder
from .context import CompilationContext, default_output_root, log_free_disk_space
from .option_rules import (
    OPTION_RULES,
    OptionRule,
    apply_option_rules,
    validate_options,
)

__all__ = [
    # Context
    "CompilationContext",
    "default_output_root",
    "log_free_disk_space",
    # Classpath
    "OutputResolver",
    "TestClasspathBuilder",
    # Option rules
    "OPTION_RULES",
    "OptionRule",
    "apply_option_rules",
    "validate_options",
]
