"""
Build messages: the logging facade used by build steps.

A BuildMessages instance wraps a logger and the sink that receives
"artifact built" events. Fatal problems reported through `error()` are
logged and raised as ConfigurationError.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from .validation import ConfigurationError

logger = logging.getLogger(__name__)

# Receives `absolutePath[=>relativeTarget]` for every published artifact.
ArtifactSink = Callable[[str], None]

_SERVICE_MESSAGE_ESCAPES = (
    ("|", "||"),
    ("'", "|'"),
    ("\n", "|n"),
    ("\r", "|r"),
    ("[", "|["),
    ("]", "|]"),
)


def escape_service_message(value: str) -> str:
    """Escape a value for a CI service message."""
    for raw, escaped in _SERVICE_MESSAGE_ESCAPES:
        value = value.replace(raw, escaped)
    return value


def print_publish_artifacts_message(report: str) -> None:
    """Default artifact sink: print a publishArtifacts service message to stdout."""
    sys.stdout.write(f"##ci[publishArtifacts '{escape_service_message(report)}']\n")
    sys.stdout.flush()


class BuildMessages:
    """
    Logging facade handed to every build step.

    Args:
        name: Logger name.
        artifact_sink: Callable receiving artifact reports.
    """

    def __init__(self, name: str = "buildpilot.build",
                 artifact_sink: Optional[ArtifactSink] = None):
        self.logger = logging.getLogger(name)
        self.artifact_sink = artifact_sink or print_publish_artifacts_message

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def error(self, message: str, cause: Optional[BaseException] = None) -> None:
        """Log a fatal problem and raise ConfigurationError."""
        self.logger.error(message)
        raise ConfigurationError(message) from cause

    def artifact_built(self, report: str) -> None:
        self.logger.debug(f"Artifact built: {report}")
        self.artifact_sink(report)

    @contextmanager
    def block(self, name: str) -> Iterator[None]:
        """Log the start and the duration of a named build step."""
        self.logger.info(f"{name}...")
        started = time.monotonic()
        try:
            yield
        finally:
            self.logger.info(f"{name} finished in {time.monotonic() - started:.1f}s")
