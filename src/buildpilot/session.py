"""
Build session: state shared by every context of one top-level invocation.

The session owns the publication byte counter and remembers which one-time
setup steps (dependency installation) already ran. It is created by the
top-level caller and passed explicitly to whatever needs it.
"""

import logging
import threading
from typing import Callable, Optional, Set

from .models.options import PublicationPolicy
from .publishing import ArtifactPublisher, PublicationCounter
from .system.disk import get_free_space

logger = logging.getLogger(__name__)


class BuildSession:
    """
    Scoped state of a build.

    Args:
        publication_policy: Thresholds used by publishers of this session
    """

    def __init__(self, publication_policy: Optional[PublicationPolicy] = None):
        self.publication_policy = publication_policy or PublicationPolicy()
        self.publication_counter = PublicationCounter()
        self._completed_steps: Set[str] = set()
        self._lock = threading.Lock()

    def run_once(self, key: str, action: Callable[[], None]) -> bool:
        """
        Run `action` unless a step with the same key already ran.

        The step counts as done even if `action` raises, so a failed
        installation is not retried by nested invocations.

        Returns:
            True if `action` was run by this call
        """
        with self._lock:
            if key in self._completed_steps:
                logger.debug(f"Skipping '{key}': already done in this session")
                return False
            self._completed_steps.add(key)
        action()
        return True

    def create_artifact_publisher(self, context, free_space_probe=get_free_space) -> ArtifactPublisher:
        """Publisher for `context` sharing this session's byte counter."""
        return ArtifactPublisher(
            paths=context.paths,
            options=context.options,
            messages=context.messages,
            counter=self.publication_counter,
            policy=self.publication_policy,
            free_space_probe=free_space_probe,
        )
