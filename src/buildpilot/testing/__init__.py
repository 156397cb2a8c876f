"""
Test execution for the buildpilot package.

- Selection of the tests to run (run configurations, groups and patterns,
  batch discovery, remote debugging)
- JVM argument and system property assembly
- Static class file scanning for batch discovery
- Forked JVM and build task runner backends
"""

from .backends import (
    BuildTaskRunner,
    ForkedJvmBackend,
    JUnitTaskSpec,
    TaskRunnerBackend,
    TestBackend,
    TestLaunch,
    create_backend,
    quote_argument,
    write_argument_file,
)
from .classfile import ClassFileInfo, MethodInfo, parse_class_file, read_class_file
from .discovery import ant_pattern_to_regex, class_name_from_path, discover_test_invocations
from .jvm_args import COMMON_VM_OPTIONS, JvmArgumentsBuilder, remove_standard_jvm_options
from .orchestrator import CompilationTasks, TestRunOrchestrator, TestRunReport
from .selection import (
    SelectionMode,
    TestSelection,
    check_options,
    is_running_in_batch_mode,
    read_remote_debug_request,
    resolve_selection,
)

__all__ = [
    # Orchestration
    "CompilationTasks",
    "TestRunOrchestrator",
    "TestRunReport",
    # Selection
    "SelectionMode",
    "TestSelection",
    "check_options",
    "is_running_in_batch_mode",
    "read_remote_debug_request",
    "resolve_selection",
    # JVM arguments
    "COMMON_VM_OPTIONS",
    "JvmArgumentsBuilder",
    "remove_standard_jvm_options",
    # Discovery
    "ClassFileInfo",
    "MethodInfo",
    "ant_pattern_to_regex",
    "class_name_from_path",
    "discover_test_invocations",
    "parse_class_file",
    "read_class_file",
    # Backends
    "BuildTaskRunner",
    "ForkedJvmBackend",
    "JUnitTaskSpec",
    "TaskRunnerBackend",
    "TestBackend",
    "TestLaunch",
    "create_backend",
    "quote_argument",
    "write_argument_file",
]
