"""
Artifact publication with disk space admission control.

Every artifact a build step produces is reported to the CI artifact sink.
Large artifacts under the artifacts directory are copied again by the CI
server when the build finishes, so reporting them early costs a second copy
on the agent's disk. Such artifacts are only reported early when the volume
has room for the remaining artifact budget plus a safety margin.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Union

from ..constants import BuildSteps
from ..messages import BuildMessages
from ..models.options import BuildOptions, PublicationPolicy
from ..models.runtime import BuildPaths
from ..system.disk import format_file_size, get_free_space

logger = logging.getLogger(__name__)

FreeSpaceProbe = Callable[[Path], int]


class PublicationCounter:
    """Thread-safe running total of bytes admitted for eager publication."""

    def __init__(self):
        self._total = 0
        self._lock = threading.Lock()

    def add_and_get(self, delta: int) -> int:
        with self._lock:
            self._total += delta
            return self._total

    @property
    def total(self) -> int:
        with self._lock:
            return self._total


class ArtifactPublisher:
    """
    Reports built artifacts as `absolutePath[=>relativeTarget]`.

    Args:
        paths: Paths of the build; artifacts under `paths.artifacts_dir`
            get a relative target
        options: Build options (`build_steps_to_skip` disables publication)
        messages: Messages whose sink receives the reports
        counter: Byte counter shared by all publishers of a build session
        policy: Thresholds of the admission heuristic
        free_space_probe: Returns free bytes on the volume of a path
    """

    def __init__(
        self,
        paths: BuildPaths,
        options: BuildOptions,
        messages: BuildMessages,
        counter: PublicationCounter,
        policy: PublicationPolicy = PublicationPolicy(),
        free_space_probe: FreeSpaceProbe = get_free_space,
    ):
        self.paths = paths
        self.options = options
        self.messages = messages
        self.counter = counter
        self.policy = policy
        self.free_space_probe = free_space_probe

    def notify_artifact_built(self, artifact_path: Union[str, Path]) -> None:
        """
        Report an artifact given by a possibly relative path.

        The directory of the artifact is canonicalized like the build paths,
        so symlinked output roots still match the artifacts directory.
        """
        file = Path(os.path.abspath(artifact_path))
        self.notify_artifact_was_built(file.parent.resolve() / file.name)

    def notify_artifact_was_built(self, file: Path) -> None:
        """Report an artifact unless publication is skipped or disk space is short."""
        if BuildSteps.CI_ARTIFACTS_PUBLICATION in self.options.build_steps_to_skip:
            return

        if file.is_file() and not self._admit(file):
            return

        self.messages.artifact_built(self.format_report(file))

    def _admit(self, file: Path) -> bool:
        file_size = file.stat().st_size
        if file_size <= self.policy.eager_publish_threshold:
            return True

        produced_size = self.counter.add_and_get(file_size)
        artifacts_dir = self.paths.artifacts_dir
        will_be_published_when_build_finishes = artifacts_dir in file.parents

        try:
            available_space = self.free_space_probe(file)
        except OSError as e:
            self.messages.warning(f"Cannot determine free disk space for {file}, publishing it anyway: {e}")
            return True

        required_space = (self.policy.required_space_for_artifacts - produced_size
                          + self.policy.required_additional_space + file_size)
        skip_publishing = will_be_published_when_build_finishes and available_space < required_space

        self.messages.debug(f"Checking free space before publishing {file} ({format_file_size(file_size)}): ")
        self.messages.debug(f" total produced: {format_file_size(produced_size)}")
        self.messages.debug(f" available space: {format_file_size(available_space)}")
        verdict = "will be" if skip_publishing else "won't be"
        self.messages.debug(f" {verdict} skipped")

        if skip_publishing:
            self.messages.info(f"Artifact {file} won't be published early to avoid running out of disk space")
            return False
        return True

    def format_report(self, file: Path) -> str:
        """`file` plus `=>target` when it lies under the artifacts directory."""
        artifacts_dir = self.paths.artifacts_dir
        target = ""
        parent = file.parent
        if parent == artifacts_dir or artifacts_dir in parent.parents:
            relative_parent = parent.relative_to(artifacts_dir).as_posix()
            target = "" if relative_parent == "." else relative_parent

        if file.is_dir():
            target = f"{target}/{file.name}" if target else file.name

        return f"{file}=>{target}" if target else str(file)
