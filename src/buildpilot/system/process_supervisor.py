"""
Child process supervision.

Spawns a process, copies its stdout and stderr line by line into the parent's
streams from two daemon reader threads and blocks until the process exits.
There is no timeout: once launched, a child runs to completion.
"""

import logging
import os
import shlex
import subprocess
import sys
import threading
from pathlib import Path
from typing import IO, Mapping, Optional, Sequence

from ..constants import TimeoutConstants
from ..validation import ErrorSeverity, handle_error, handle_subprocess_error

logger = logging.getLogger(__name__)


class ProcessSupervisor:
    """
    Runs child processes and drains their output streams.

    Args:
        stdout: Stream receiving the child's stdout (sys.stdout at run time by default)
        stderr: Stream receiving the child's stderr (sys.stderr at run time by default)
        reader_join_timeout: How long to wait for readers after the child exits
    """

    def __init__(
        self,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
        reader_join_timeout: float = TimeoutConstants.READER_JOIN_TIMEOUT,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self.reader_join_timeout = reader_join_timeout

    def run(self, command: Sequence[str], env: Optional[Mapping[str, str]] = None,
            cwd: Optional[Path] = None) -> int:
        """
        Run `command` with `env` merged over the current environment.

        Returns:
            The child's exit code
        """
        merged_env = {**os.environ, **(env or {})}
        command_line = shlex.join(command)
        logger.debug(f"Starting process: {command_line}")

        try:
            process = subprocess.Popen(
                list(command),
                env=merged_env,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            handle_subprocess_error(e, command_line, logger=logger)
            raise

        readers = [
            self._start_reader(process.stderr, self.stderr or sys.stderr, "Read forked error output"),
            self._start_reader(process.stdout, self.stdout or sys.stdout, "Read forked output"),
        ]

        exit_code = process.wait()
        for reader in readers:
            reader.join(self.reader_join_timeout)
            if reader.is_alive():
                logger.warning(f"'{reader.name}' is still running {self.reader_join_timeout}s after the process exited")

        logger.info(f"Process finished with exit code {exit_code}: {command_line}")
        return exit_code

    def _start_reader(self, source: IO[bytes], target: IO[str], name: str) -> threading.Thread:
        reader = threading.Thread(target=copy_stream, args=(source, target), name=name, daemon=True)
        reader.start()
        return reader


def copy_stream(source: IO[bytes], target: IO[str]) -> None:
    """
    Copy UTF-8 lines from `source` into `target` until end of stream.

    Lines that cannot be decoded are dropped silently; other I/O failures
    are logged and end the copy.
    """
    try:
        with source:
            for raw_line in iter(source.readline, b""):
                try:
                    line = raw_line.decode("utf-8")
                except UnicodeDecodeError:
                    continue
                target.write(line)
                target.flush()
    except OSError as e:
        handle_error(
            error=e,
            context="reading child process output",
            severity=ErrorSeverity.ERROR,
            reraise=False,
            logger=logger
        )
