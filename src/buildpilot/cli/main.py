"""
Command-line interface for the buildpilot test orchestrator.

This module parses the command line, loads `build.toml`, creates the build
session and the compilation context and runs the selected tests.
"""

import argparse
import dataclasses
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..compilation import CompilationContext
from ..config import get_config, set_config_path
from ..constants import ProjectLayout
from ..session import BuildSession
from ..system.commands import DependencyInstaller
from ..testing import TestRunOrchestrator
from ..validation import BuildError, ValidationError, handle_cli_error, validate_path_exists

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def parse_properties(definitions: Optional[Sequence[str]]) -> Dict[str, str]:
    """
    Parse `-D key=value` definitions.

    Raises:
        ValidationError: If a definition has no '='
    """
    properties: Dict[str, str] = {}
    for definition in definitions or ():
        key, separator, value = definition.partition("=")
        if not separator or not key:
            raise ValidationError(
                f"Property definition must have the form key=value, got '{definition}'",
                field_name="-D",
                value=definition
            )
        properties[key] = value
    return properties


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildpilot",
        description="Compile and run the tests of a multi-module JVM project."
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_tests = subparsers.add_parser("run-tests", help="Run the tests selected by the [testing] options.")
    run_tests.add_argument(
        "--community-home",
        type=Path,
        required=True,
        help="Root of the community source tree.",
    )
    run_tests.add_argument(
        "--project-home",
        type=Path,
        help="Root of the project; defaults to the community home.",
    )
    run_tests.add_argument(
        "--config",
        type=Path,
        help="Path to build.toml. Defaults to ./build.toml.",
    )
    run_tests.add_argument(
        "-D",
        dest="properties",
        action="append",
        metavar="KEY=VALUE",
        help="External property; 'pass.KEY=VALUE' is forwarded to the test process as KEY.",
    )
    run_tests.add_argument(
        "--main-module",
        type=str,
        help="Module whose tests run unless run configurations are selected.",
    )
    run_tests.add_argument(
        "--jvm-option",
        dest="jvm_options",
        action="append",
        default=[],
        help="Additional JVM option for the test process. May be repeated.",
    )
    run_tests.add_argument(
        "--install-dependencies",
        action="store_true",
        help="Run the dependency installer before the tests.",
    )
    return parser


def run_tests_command(args: argparse.Namespace) -> List[int]:
    """Run the `run-tests` command; returns the exit codes of the test processes."""
    if args.config is not None:
        set_config_path(args.config)

    try:
        validate_path_exists(args.community_home, field_name="--community-home")
        if args.project_home is not None:
            validate_path_exists(args.project_home, field_name="--project-home")
        app_config = get_config()
        external_properties = parse_properties(args.properties)
    except (BuildError, ValidationError, FileNotFoundError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="argument and configuration validation",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    testing_options = app_config.testing
    if args.main_module:
        testing_options = dataclasses.replace(testing_options, main_module=args.main_module)

    community_home = args.community_home
    project_home = args.project_home or community_home
    session = BuildSession(app_config.publication)

    try:
        context = CompilationContext.create(
            community_home,
            project_home,
            options=app_config.build,
            env=os.environ,
            system_properties=external_properties,
        )
        installer = None
        if args.install_dependencies:
            installer = DependencyInstaller(
                app_config.dependencies,
                context.paths.community_home / ProjectLayout.DEPENDENCIES_PROJECT_DIR,
                context.messages,
            )
        orchestrator = TestRunOrchestrator(
            context,
            testing_options,
            session,
            installer=installer,
            external_properties=external_properties,
        )
        report = orchestrator.run_tests(additional_jvm_options=args.jvm_options)
    except BuildError as e:
        handle_cli_error(
            error=e,
            context="test run",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    logger.info(f"Tests finished ({report.selection.mode.value}), exit codes: {report.exit_codes}")
    return report.exit_codes


def main_cli(argv: Optional[Sequence[str]] = None) -> None:
    """
    Main command-line interface for buildpilot.

    Test process exit codes are reported but do not change the exit status;
    configuration problems exit with status 1.

    Raises:
        SystemExit: On configuration errors or invalid arguments.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "run-tests":
        run_tests_command(args)
