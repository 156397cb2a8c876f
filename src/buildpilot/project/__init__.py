"""
Project loading for the buildpilot package.

This module reads the project description, the module renaming history,
toolchain installations and JUnit run configuration descriptors.
"""

from .loader import LoadedProject, ProjectModelLoader, parse_project_model
from .rename_history import load_module_rename_map, read_rename_history
from .run_configurations import (
    find_run_configuration,
    load_run_configuration,
    load_run_configurations,
    run_configuration_file_name,
)
from .toolchains import (
    find_toolchain_home,
    merge_release_modules,
    read_release_modules,
    resolve_toolchains,
    strip_vendor_prefix,
    toolchain_env_var,
    toolchain_name_for_version,
)

__all__ = [
    # Loading
    "LoadedProject",
    "ProjectModelLoader",
    "parse_project_model",
    # Rename history
    "load_module_rename_map",
    "read_rename_history",
    # Run configurations
    "find_run_configuration",
    "load_run_configuration",
    "load_run_configurations",
    "run_configuration_file_name",
    # Toolchains
    "find_toolchain_home",
    "merge_release_modules",
    "read_release_modules",
    "resolve_toolchains",
    "strip_vendor_prefix",
    "toolchain_env_var",
    "toolchain_name_for_version",
]
