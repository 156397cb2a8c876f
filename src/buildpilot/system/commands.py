"""
Command execution utilities.

This module provides a helper executing a command and capturing its output,
and the runner of the external dependency installation tool.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Sequence, Tuple

from ..messages import BuildMessages
from ..models.options import DependencyInstallerConfig
from ..validation import BuildError, handle_subprocess_error

logger = logging.getLogger(__name__)


def split_jvm_options(value: str) -> List[str]:
    """Split a space separated option string.

    Quotes group words and are removed. Backslashes and `#` are kept as is,
    so Windows paths survive.

    Raises:
        ValueError: If a quote is not closed
    """
    lexer = shlex.shlex(value, posix=True)
    lexer.whitespace_split = True
    lexer.escape = ""
    lexer.commenters = ""
    return list(lexer)


def run_command(command: Sequence[str], cwd: Path) -> Tuple[int, str, str]:
    """Execute a command and capture its output.

    Args:
        command: The command and its arguments.
        cwd: Working directory path for command execution. A relative
            executable is resolved against it.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 for execution errors.
    """
    command_line = shlex.join(command)
    logger.debug(f"Executing command: '{command_line}' in '{cwd}'")
    try:
        process = subprocess.run(
            list(command),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {command[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{command[0]}'"
    except OSError as e:
        logger.error(f"Unexpected error while running command '{command_line[:50]}...': {type(e).__name__}: {e}",
                     exc_info=True)
        return -1, "", f"An unexpected error occurred: {e}"


class DependencyInstaller:
    """
    Runs tasks of the external dependency installation tool.

    The tool is treated as an opaque command: `<command> <task> [args]`
    executed in the dependencies project directory.
    """

    def __init__(self, config: DependencyInstallerConfig, project_dir: Path, messages: BuildMessages):
        self.config = config
        self.project_dir = Path(project_dir)
        self.messages = messages

    def run(self, title: str, *tasks: str) -> None:
        """
        Run installer tasks.

        Raises:
            BuildError: If the installer exits with a non-zero code
        """
        command = list(self.config.command) + list(tasks)
        with self.messages.block(title):
            return_code, stdout, stderr = run_command(command, self.project_dir)
            if stdout:
                logger.debug(stdout.rstrip())
            if return_code != 0:
                handle_subprocess_error(
                    BuildError(f"{title} failed with exit code {return_code}: {stderr.strip()}"),
                    shlex.join(command),
                    logger=logger,
                )
