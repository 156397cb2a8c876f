"""
Artifact publication for the buildpilot package.
"""

from .publisher import ArtifactPublisher, FreeSpaceProbe, PublicationCounter

__all__ = [
    "ArtifactPublisher",
    "FreeSpaceProbe",
    "PublicationCounter",
]
