"""
Configuration validation utilities.

This module turns the raw sections of `build.toml` into the typed option
dataclasses: [build], [testing], [publication] and [dependencies].
"""

import logging
from typing import Any, Dict

from ..models.options import (
    ALL_EXCLUDE_DEFINED_GROUP,
    BOOTSTRAP_SUITE_DEFAULT,
    AppConfig,
    BuildOptions,
    DependencyInstallerConfig,
    PublicationPolicy,
    RunnerKind,
    TestingOptions,
)
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_optional_string,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

# Options that hold a path or a free form string
_BUILD_STRING_OPTIONS = (
    "path_to_compiled_classes_archive",
    "path_to_compiled_classes_archives_metadata",
    "output_root_path",
    "log_path",
    "jdks_target_dir",
    "project_classes_output_directory",
)

_TESTING_STRING_OPTIONS = (
    "test_patterns",
    "test_configurations",
    "main_module",
    "batch_test_includes",
    "jvm_memory_options",
    "custom_jre_path",
    "platform_prefix",
    "before_run_project_artifacts",
    "causal_profiling_agent_args",
    "causal_profiling_test_class",
)

_TESTING_FLAG_OPTIONS = (
    ("performance_tests_only", False),
    ("fail_fast", False),
    ("debug_enabled", True),
    ("suspend_debug_process", False),
    ("enable_causal_profiling", False),
)


def _check_unknown_keys(data: Dict[str, Any], known, section: str) -> None:
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValidationError(
            f"Unknown option(s) in [{section}]: {', '.join(unknown)}",
            field_name=section,
            value=unknown
        )


def validate_build_options(build_data: Dict[str, Any]) -> BuildOptions:
    """
    Validate and create BuildOptions from the [build] section.

    Args:
        build_data: Raw [build] section from TOML

    Returns:
        Validated BuildOptions instance

    Raises:
        ValidationError: If validation fails
    """
    _check_unknown_keys(
        build_data,
        _BUILD_STRING_OPTIONS + (
            "incremental_compilation",
            "use_compiled_classes_from_project_output",
            "build_steps_to_skip",
            "toolchain_version",
        ),
        "build",
    )

    values: Dict[str, Any] = {
        name: validate_optional_string(build_data.get(name), field_name=f"build.{name}")
        for name in _BUILD_STRING_OPTIONS
    }
    values["incremental_compilation"] = validate_boolean(
        build_data.get("incremental_compilation", False),
        field_name="build.incremental_compilation",
    )
    values["use_compiled_classes_from_project_output"] = validate_boolean(
        build_data.get("use_compiled_classes_from_project_output", False),
        field_name="build.use_compiled_classes_from_project_output",
    )
    values["build_steps_to_skip"] = frozenset(validate_string_list(
        build_data.get("build_steps_to_skip"),
        field_name="build.build_steps_to_skip",
    ))
    values["toolchain_version"] = validate_positive_integer(
        build_data.get("toolchain_version", 11),
        min_value=6,
        max_value=99,
        field_name="build.toolchain_version",
    )
    return BuildOptions(**values)


def validate_testing_options(testing_data: Dict[str, Any]) -> TestingOptions:
    """
    Validate and create TestingOptions from the [testing] section.

    Args:
        testing_data: Raw [testing] section from TOML

    Returns:
        Validated TestingOptions instance

    Raises:
        ValidationError: If validation fails
    """
    flag_names = tuple(name for name, _ in _TESTING_FLAG_OPTIONS)
    _check_unknown_keys(
        testing_data,
        _TESTING_STRING_OPTIONS + flag_names + (
            "test_groups",
            "bootstrap_suite",
            "bootstrap_module",
            "runner_class",
            "bootstrap_testcases",
            "class_loader_module",
            "junit_libraries",
            "runner",
            "debug_host",
            "debug_port",
        ),
        "testing",
    )

    values: Dict[str, Any] = {
        name: validate_optional_string(testing_data.get(name), field_name=f"testing.{name}")
        for name in _TESTING_STRING_OPTIONS
    }
    for name, default in _TESTING_FLAG_OPTIONS:
        values[name] = validate_boolean(testing_data.get(name, default), field_name=f"testing.{name}")

    values["test_groups"] = validate_optional_string(
        testing_data.get("test_groups"), field_name="testing.test_groups"
    ) or ALL_EXCLUDE_DEFINED_GROUP
    values["bootstrap_suite"] = validate_optional_string(
        testing_data.get("bootstrap_suite"), field_name="testing.bootstrap_suite"
    ) or BOOTSTRAP_SUITE_DEFAULT

    for name in ("bootstrap_module", "runner_class", "bootstrap_testcases", "class_loader_module", "debug_host"):
        value = validate_optional_string(testing_data.get(name), field_name=f"testing.{name}")
        if value is not None:
            values[name] = value

    if "junit_libraries" in testing_data:
        values["junit_libraries"] = tuple(validate_string_list(
            testing_data["junit_libraries"], field_name="testing.junit_libraries"
        ))

    values["runner"] = RunnerKind(validate_enum_choice(
        testing_data.get("runner", RunnerKind.FORKED.value),
        valid_choices=[kind.value for kind in RunnerKind],
        field_name="testing.runner",
        case_sensitive=False,
    ))
    values["debug_port"] = validate_positive_integer(
        testing_data.get("debug_port", 5005),
        min_value=1,
        max_value=65535,
        field_name="testing.debug_port",
    )
    return TestingOptions(**values)


def validate_publication_policy(publication_data: Dict[str, Any]) -> PublicationPolicy:
    """Validate the [publication] section; all thresholds are in bytes."""
    defaults = PublicationPolicy()
    _check_unknown_keys(
        publication_data,
        ("eager_publish_threshold", "required_additional_space", "required_space_for_artifacts"),
        "publication",
    )
    return PublicationPolicy(
        eager_publish_threshold=validate_positive_integer(
            publication_data.get("eager_publish_threshold", defaults.eager_publish_threshold),
            min_value=0,
            field_name="publication.eager_publish_threshold",
        ),
        required_additional_space=validate_positive_integer(
            publication_data.get("required_additional_space", defaults.required_additional_space),
            min_value=0,
            field_name="publication.required_additional_space",
        ),
        required_space_for_artifacts=validate_positive_integer(
            publication_data.get("required_space_for_artifacts", defaults.required_space_for_artifacts),
            min_value=0,
            field_name="publication.required_space_for_artifacts",
        ),
    )


def validate_dependency_installer(dependencies_data: Dict[str, Any]) -> DependencyInstallerConfig:
    """Validate the [dependencies] section describing the installer command."""
    defaults = DependencyInstallerConfig()
    _check_unknown_keys(dependencies_data, ("command", "testing_task", "compilation_task"), "dependencies")

    command = defaults.command
    if "command" in dependencies_data:
        command = tuple(validate_string_list(dependencies_data["command"], field_name="dependencies.command"))
        if not command:
            raise ValidationError(
                "dependencies.command must not be empty",
                field_name="dependencies.command",
                value=dependencies_data["command"]
            )

    return DependencyInstallerConfig(
        command=command,
        testing_task=validate_optional_string(
            dependencies_data.get("testing_task"), field_name="dependencies.testing_task"
        ) or defaults.testing_task,
        compilation_task=validate_optional_string(
            dependencies_data.get("compilation_task"), field_name="dependencies.compilation_task"
        ) or defaults.compilation_task,
    )


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a whole parsed `build.toml`. Missing sections get defaults.
    """
    _check_unknown_keys(config_data, ("build", "testing", "publication", "dependencies"), "root")
    app_config = AppConfig(
        build=validate_build_options(config_data.get("build", {})),
        testing=validate_testing_options(config_data.get("testing", {})),
        publication=validate_publication_policy(config_data.get("publication", {})),
        dependencies=validate_dependency_installer(config_data.get("dependencies", {})),
    )
    logger.debug(f"Validated configuration: runner={app_config.testing.runner.value}, "
                 f"toolchain={app_config.build.toolchain_version}")
    return app_config
