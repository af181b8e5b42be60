"""Pipeline run model.

A run moves pending -> running -> succeeded | failed. Terminal states are
final, and a run's artifacts are only visible once it has succeeded.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..errors import RunStateError
from .artifact import Artifact


class RunStatus(str, Enum):
    """Lifecycle status of a pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.SUCCEEDED, RunStatus.FAILED)


class Stage(str, Enum):
    """Pipeline stages recorded on a run in the order they were entered."""

    IDLE = "idle"
    TRIGGERED = "triggered"
    VERSIONING = "versioning"
    PACKAGING = "packaging"
    PUBLISH_SKIPPED = "publish_skipped"
    PUBLISHING = "publishing"
    SELECTING = "selecting"
    FILTERING = "filtering"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PipelineRun(BaseModel):
    """One execution of a build or release pipeline, written to run.json.

    Attributes:
        run_id: Unique run identifier (YYYYMMDD-HHMMSS-ffffff[-<counter>]).
        pipeline_id: Pipeline that owns the run.
        status: Lifecycle status.
        build_counter: Counter the run was versioned with (builds only).
        version: Rendered version of the primary artifact.
        artifacts: Artifacts retained by the run, in production order.
        stages: Stages entered, in order.
        error: Failure message for failed runs.
        exit_code: Process exit code describing the outcome.
        source_run_id: Build run a release was promoted from.
        published: Whether anything was pushed to a feed.
    """

    run_id: str
    pipeline_id: str
    status: RunStatus = RunStatus.PENDING
    build_counter: int | None = None
    version: str | None = None
    artifacts: list[Artifact] = Field(default_factory=list)
    stages: list[Stage] = Field(default_factory=list)
    error: str | None = None
    exit_code: int = 0
    source_run_id: str | None = None
    published: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def visible_artifacts(self) -> list[Artifact]:
        """Artifacts downstream consumers may see."""
        if self.status is not RunStatus.SUCCEEDED:
            return []
        return list(self.artifacts)

    def enter(self, stage: Stage) -> None:
        self.stages.append(stage)

    def _transition(self, allowed_from: RunStatus, target: RunStatus) -> None:
        if self.status is not allowed_from:
            raise RunStateError(
                f"Run {self.run_id} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target

    def start(self) -> None:
        self._transition(RunStatus.PENDING, RunStatus.RUNNING)

    def succeed(self, artifacts: list[Artifact] | None = None) -> None:
        self._transition(RunStatus.RUNNING, RunStatus.SUCCEEDED)
        if artifacts is not None:
            self.artifacts = list(artifacts)
        self.finished_at = datetime.now()
        self.enter(Stage.SUCCEEDED)

    def fail(self, message: str, exit_code: int) -> None:
        if self.status.is_terminal:
            raise RunStateError(f"Run {self.run_id} already {self.status.value}")
        self.status = RunStatus.FAILED
        self.error = message
        self.exit_code = exit_code
        self.artifacts = []
        self.finished_at = datetime.now()
        self.enter(Stage.FAILED)
