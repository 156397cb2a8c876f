"""
buildpilot: build and test orchestration for multi-module JVM projects.

The package loads a project description, reconciles compilation options,
computes module outputs and classpaths, and runs tests out of process.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- project: Project model, rename history, toolchains and run configurations
- compilation: Compilation context, option rules and classpaths
- publishing: Disk-space-aware artifact publication
- system: Child processes, commands and disk probing
- testing: Test selection, JVM arguments, discovery and execution backends
- cli: Command-line interface

Usage:
    From command line:
        buildpilot run-tests --community-home <dir> [options]

    Programmatically:
        from buildpilot import BuildSession, CompilationContext, TestRunOrchestrator, get_config
        config = get_config()
        context = CompilationContext.create(home, home, config.build)
        TestRunOrchestrator(context, config.testing, BuildSession(config.publication)).run_tests()
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .compilation import CompilationContext
from .session import BuildSession
from .testing import TestRunOrchestrator
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    BuildOptions,
    BuildPaths,
    ProjectModel,
    RunConfiguration,
    TestingOptions,
    TestInvocation,
)

# Errors
from .validation import (
    BuildError,
    ClassFileFormatError,
    ConfigurationError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "CompilationContext",
    "BuildSession",
    "TestRunOrchestrator",
    "main_cli",
    # Models
    "AppConfig",
    "BuildOptions",
    "BuildPaths",
    "ProjectModel",
    "RunConfiguration",
    "TestingOptions",
    "TestInvocation",
    # Errors
    "BuildError",
    "ClassFileFormatError",
    "ConfigurationError",
    "ValidationError",
]
