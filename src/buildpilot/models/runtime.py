"""
Runtime data models.

This module contains data structures used while a build session runs:
canonical build paths, the shared compilation data record, run
configurations and the units of test execution.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class BuildPaths:
    """
    Canonical absolute paths of a build. Immutable after construction.
    """

    community_home: Path
    project_home: Path
    build_output_root: Path
    jdk_home: Path
    log_dir: Path

    @classmethod
    def create(
        cls,
        community_home: Path,
        project_home: Path,
        build_output_root: Path,
        jdk_home: Path,
        log_dir: Path,
    ) -> "BuildPaths":
        """Create a path set, canonicalizing every path."""
        return cls(
            community_home=Path(community_home).resolve(),
            project_home=Path(project_home).resolve(),
            build_output_root=Path(build_output_root).resolve(),
            jdk_home=Path(jdk_home).resolve(),
            log_dir=Path(log_dir).resolve(),
        )

    @property
    def artifacts_dir(self) -> Path:
        return self.build_output_root / "artifacts"

    @property
    def temp_dir(self) -> Path:
        return self.build_output_root / "temp"


@dataclass
class CompilationData:
    """
    Mutable compilation record shared by a context and all of its copies.
    """

    incremental_cache_dir: Path
    compilation_log_file: Path
    debug_log_categories: str = ""


@dataclass(frozen=True)
class RunConfiguration:
    """
    A JUnit run configuration loaded from the project's run configuration
    descriptors.
    """

    name: str
    module_name: str
    test_class_patterns: Tuple[str, ...]
    vm_parameters: Tuple[str, ...] = ()
    env_variables: Dict[str, str] = field(default_factory=dict)
    required_artifacts: Tuple[str, ...] = ()

    def __hash__(self) -> int:
        return hash((self.name, self.module_name))


@dataclass(frozen=True)
class TestInvocation:
    """A single schedulable unit: a test suite or class, optionally one method."""

    __test__ = False

    class_name: str
    method_name: Optional[str] = None

    def __str__(self) -> str:
        if self.method_name is None:
            return self.class_name
        return f"{self.class_name}#{self.method_name}"


@dataclass(frozen=True)
class RemoteDebugRequest:
    """Remote debugging coordinates supplied by the CI server."""

    jvm_options: str
    debug_type: Optional[str] = None
    target_type: Optional[str] = None
    target_class: Optional[str] = None
