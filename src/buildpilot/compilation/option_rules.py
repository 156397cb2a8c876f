"""
Compilation option reconciliation.

Conflicting options are resolved by an ordered list of rules. Each rule is a
pure function `(options, env) -> (options, warning)`: it returns the options
unchanged and no warning when it does not apply, or a demoted copy plus the
warning explaining the demotion. Rules are applied top to bottom, each one
seeing the result of the previous ones.
"""

import dataclasses
import logging
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from ..constants import EnvVars
from ..messages import BuildMessages
from ..models.options import BuildOptions

logger = logging.getLogger(__name__)

RuleResult = Tuple[BuildOptions, Optional[str]]
OptionRule = Callable[[BuildOptions, Mapping[str, str]], RuleResult]

USE_COMPILED_CLASSES_OPTION = "use_compiled_classes_from_project_output"


def external_output_disables_incremental(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    if options.use_compiled_classes_from_project_output and options.incremental_compilation:
        return (dataclasses.replace(options, incremental_compilation=False),
                f"'{USE_COMPILED_CLASSES_OPTION}' is specified, so 'incremental compilation' option will be ignored")
    return options, None


def archive_disables_incremental(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    if options.path_to_compiled_classes_archive is not None and options.incremental_compilation:
        return (dataclasses.replace(options, incremental_compilation=False),
                "Paths to the compiled project output is specified, so 'incremental compilation' option will be ignored")
    return options, None


def external_output_disables_archive(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    if options.path_to_compiled_classes_archive is not None and options.use_compiled_classes_from_project_output:
        return (dataclasses.replace(options, path_to_compiled_classes_archive=None),
                f"'{USE_COMPILED_CLASSES_OPTION}' is specified, so the archive with compiled project output won't be used")
    return options, None


def archive_metadata_disables_incremental(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    if options.path_to_compiled_classes_archives_metadata is not None and options.incremental_compilation:
        return (dataclasses.replace(options, incremental_compilation=False),
                "Paths to the compiled project output metadata is specified, "
                "so 'incremental compilation' option will be ignored")
    return options, None


def external_output_disables_archive_metadata(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    if (options.path_to_compiled_classes_archives_metadata is not None
            and options.use_compiled_classes_from_project_output):
        return (dataclasses.replace(options, path_to_compiled_classes_archives_metadata=None),
                f"'{USE_COMPILED_CLASSES_OPTION}' is specified, so the archive with the compiled project output "
                "metadata won't be used to fetch compile output")
    return options, None


def feature_branch_disables_incremental(options: BuildOptions, env: Mapping[str, str]) -> RuleResult:
    # Caches built on the default branch are stale for feature branches
    if options.incremental_compilation and env.get(EnvVars.BUILD_BRANCH_IS_DEFAULT) == "false":
        return (dataclasses.replace(options, incremental_compilation=False),
                "Incremental builds for feature branches have no sense because compilation caches are out of date, "
                "so 'incremental compilation' option will be ignored")
    return options, None


OPTION_RULES: Tuple[OptionRule, ...] = (
    external_output_disables_incremental,
    archive_disables_incremental,
    external_output_disables_archive,
    archive_metadata_disables_incremental,
    external_output_disables_archive_metadata,
    feature_branch_disables_incremental,
)


def apply_option_rules(
    options: BuildOptions,
    env: Mapping[str, str],
    rules: Sequence[OptionRule] = OPTION_RULES,
) -> Tuple[BuildOptions, List[str]]:
    """Apply `rules` in order; returns the final options and all warnings."""
    warnings: List[str] = []
    for rule in rules:
        options, warning = rule(options, env)
        if warning is not None:
            warnings.append(warning)
    return options, warnings


def validate_options(options: BuildOptions, env: Mapping[str, str], messages: BuildMessages) -> BuildOptions:
    """
    Reconcile conflicting compilation options. Never fails.

    Every demotion is logged as a warning through `messages`.
    """
    validated, warnings = apply_option_rules(options, env)
    for warning in warnings:
        messages.warning(warning)
    return validated
