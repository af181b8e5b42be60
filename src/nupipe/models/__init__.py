"""Pydantic data models for nupipe.

- Versions and artifacts (Version, Artifact)
- Per-invocation input and credentials (InvocationInput, FeedCredential)
- Run records and lifecycle (PipelineRun, RunStatus, Stage)
- Trigger events and the release lock (SourceChange, Lock)

Example:
    >>> from nupipe.models import Version
    >>> Version(base="2.0.0", build_counter=345, pre_release_label="pre").render()
    '2.0.0-pre.345'
"""

from .artifact import Artifact, artifact_file_name
from .credential import FeedCredential
from .invocation import InvocationInput
from .lock import Lock
from .run import PipelineRun, RunStatus, Stage
from .trigger import SourceChange
from .version import Version

__all__ = [
    "Artifact",
    "FeedCredential",
    "InvocationInput",
    "Lock",
    "PipelineRun",
    "RunStatus",
    "SourceChange",
    "Stage",
    "Version",
    "artifact_file_name",
]
