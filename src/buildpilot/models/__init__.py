"""
Data models for the build orchestrator.

Configuration Models:
- Compilation and testing options
- Artifact publication policy
- Dependency installer settings

Project Models:
- Modules, libraries and dependencies
- Toolchain registry
- Module rename history

Runtime Models:
- Canonical build paths
- Shared compilation data
- Run configurations and test invocations
"""

from .options import (
    ALL_EXCLUDE_DEFINED_GROUP,
    BOOTSTRAP_SUITE_DEFAULT,
    AppConfig,
    BuildOptions,
    DependencyInstallerConfig,
    PublicationPolicy,
    RunnerKind,
    TestingOptions,
)

from .project import (
    Dependency,
    DependencyScope,
    Library,
    Module,
    ModuleRenameMap,
    ProjectModel,
    Toolchain,
)

from .runtime import (
    BuildPaths,
    CompilationData,
    RemoteDebugRequest,
    RunConfiguration,
    TestInvocation,
)

__all__ = [
    # Configuration
    "ALL_EXCLUDE_DEFINED_GROUP",
    "BOOTSTRAP_SUITE_DEFAULT",
    "AppConfig",
    "BuildOptions",
    "DependencyInstallerConfig",
    "PublicationPolicy",
    "RunnerKind",
    "TestingOptions",
    # Project
    "Dependency",
    "DependencyScope",
    "Library",
    "Module",
    "ModuleRenameMap",
    "ProjectModel",
    "Toolchain",
    # Runtime
    "BuildPaths",
    "CompilationData",
    "RemoteDebugRequest",
    "RunConfiguration",
    "TestInvocation",
]
