"""
Option and policy data models.

This module contains the configuration structures for a build session:
compilation options, testing options, the artifact publication policy and the
dependency installer settings, plus the aggregate loaded from `build.toml`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from ..constants import SizeConstants


@dataclass(frozen=True)
class BuildOptions:
    """
    Compilation options.

    Instances are never mutated; option validation returns a new instance
    with the conflicting options demoted.
    """

    # Compile incrementally reusing the caches in the build output root.
    incremental_compilation: bool = False
    # Do not compile; use the classes already present in the project output.
    use_compiled_classes_from_project_output: bool = False
    # Archive with compiled project output to unpack instead of compiling.
    path_to_compiled_classes_archive: Optional[str] = None
    # Metadata describing where to fetch the compiled output archives from.
    path_to_compiled_classes_archives_metadata: Optional[str] = None
    # Overrides the computed build output root.
    output_root_path: Optional[str] = None
    # Overrides `<outputRoot>/log`.
    log_path: Optional[str] = None
    # Directory holding downloaded toolchains.
    jdks_target_dir: Optional[str] = None
    # Explicit project classes output directory.
    project_classes_output_directory: Optional[str] = None
    # Identifiers of build steps that must not run.
    build_steps_to_skip: FrozenSet[str] = frozenset()
    # Version of the primary toolchain (8 -> "1.8", 11 -> "11").
    toolchain_version: int = 11


class RunnerKind(Enum):
    """Execution backend used to run tests."""
    FORKED = "forked"
    TASK_RUNNER = "task_runner"


ALL_EXCLUDE_DEFINED_GROUP = "ALL_EXCLUDE_DEFINED"
BOOTSTRAP_SUITE_DEFAULT = "tests.BootstrapTests"


@dataclass(frozen=True)
class TestingOptions:
    """
    Options controlling which tests run and how the test JVM is started.
    """

    __test__ = False

    # --- Selection ---
    test_groups: str = ALL_EXCLUDE_DEFINED_GROUP
    test_patterns: Optional[str] = None
    # Semicolon separated names of JUnit run configurations.
    test_configurations: Optional[str] = None
    main_module: Optional[str] = None
    # Ant-style glob over the compiled test output, e.g. "com/acme/**Test.class".
    batch_test_includes: Optional[str] = None

    # --- Execution ---
    bootstrap_suite: str = BOOTSTRAP_SUITE_DEFAULT
    bootstrap_module: str = "tools.testsBootstrap"
    runner_class: str = "tests.JUnit5Runner"
    # Passed to the runner as the suite listing all test cases.
    bootstrap_testcases: str = "tests.AllTests"
    # Module whose production classpath is appended when the child uses a custom system class loader.
    class_loader_module: str = "intellij.platform.util"
    junit_libraries: Tuple[str, ...] = ("JUnit5", "JUnit5Launcher", "JUnit5Vintage")
    jvm_memory_options: Optional[str] = None
    custom_jre_path: Optional[str] = None
    platform_prefix: Optional[str] = None
    performance_tests_only: bool = False
    before_run_project_artifacts: Optional[str] = None
    fail_fast: bool = False
    runner: RunnerKind = RunnerKind.FORKED

    # --- Debugging and profiling ---
    debug_enabled: bool = True
    debug_host: str = "localhost"
    debug_port: int = 5005
    suspend_debug_process: bool = False
    enable_causal_profiling: bool = False
    causal_profiling_agent_args: Optional[str] = None
    causal_profiling_test_class: Optional[str] = None


@dataclass(frozen=True)
class PublicationPolicy:
    """
    Thresholds of the disk-space-aware artifact publication heuristic.

    A build publishes at most `required_space_for_artifacts` bytes of
    artifacts and needs `required_additional_space` bytes for compiled
    classes, dependencies and temp files.
    """

    eager_publish_threshold: int = SizeConstants.EAGER_PUBLISH_THRESHOLD
    required_additional_space: int = SizeConstants.REQUIRED_ADDITIONAL_SPACE
    required_space_for_artifacts: int = SizeConstants.REQUIRED_SPACE_FOR_ARTIFACTS


@dataclass(frozen=True)
class DependencyInstallerConfig:
    """Command line of the external dependency installation tool."""

    # Executable relative to the dependencies project directory, or absolute.
    command: Tuple[str, ...] = ("./gradlew", "--no-daemon")
    testing_task: str = "setupBundledMaven"
    compilation_task: str = "setupJdks"


@dataclass
class AppConfig:
    """
    The root configuration object aggregating all loaded settings.
    """

    build: BuildOptions
    testing: TestingOptions
    publication: PublicationPolicy
    dependencies: DependencyInstallerConfig
