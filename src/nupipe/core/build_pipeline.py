"""Build pipeline: checkout -> version -> pack -> optional pre-release publish.

Stages: idle -> triggered -> versioning -> packaging ->
publish_skipped | publishing -> succeeded | failed.

Failures are local to the run: the run is recorded as failed with the error
and its exit code, nothing it produced is retained, and nothing is retried.
A build holds the pipeline lock for its whole run, so two builds never share
the workspace; an overlapping build fails with ConcurrencyViolation.
"""

import logging
from pathlib import Path

from ..errors import PipelineError, WorkspaceError
from ..models import (
    Artifact,
    FeedCredential,
    InvocationInput,
    PipelineRun,
    SourceChange,
    Stage,
    Version,
)
from ..services.feed import FeedPusher
from ..services.workspace import checkout
from .artifact_filter import ArtifactRules
from .lock_manager import is_locked, pipeline_lock
from .packager import ArtifactPackager
from .publish_gate import should_publish
from .run_history import RunHistory, generate_run_id
from .version_policy import resolve

logger = logging.getLogger(__name__)


class BuildPipeline:
    """Builds the pre-release and release packages for one build counter."""

    def __init__(
        self,
        pipeline_id: str,
        project_root: Path,
        state_dir: Path,
        workspace: Path,
        history: RunHistory,
        packager: ArtifactPackager,
        pusher: FeedPusher,
        artifact_rules: ArtifactRules,
        vcs_url: str | None = None,
        default_branch: str = "main",
        clean_checkout: bool = True,
    ) -> None:
        self.pipeline_id = pipeline_id
        self.project_root = project_root
        self.state_dir = state_dir
        self.workspace = workspace
        self.history = history
        self.packager = packager
        self.pusher = pusher
        self.artifact_rules = artifact_rules
        self.vcs_url = vcs_url
        self.default_branch = default_branch
        self.clean_checkout = clean_checkout

    @property
    def busy(self) -> bool:
        """True while any invocation holds this pipeline's lock."""
        return is_locked(self.state_dir, self.pipeline_id)

    def _enter(self, run: PipelineRun, stage: Stage) -> None:
        logger.debug("%s %s: %s", self.pipeline_id, run.run_id, stage.value)
        run.enter(stage)

    def resolve_versions(self, invocation: InvocationInput, counter: int) -> list[Version]:
        """Versions to pack: the labelled pre-release first, then the release."""
        primary = resolve(invocation.base_version, counter, invocation.pre_release_label)
        if not primary.is_pre_release:
            return [primary]
        return [primary, resolve(invocation.base_version, counter, None)]

    def run(
        self,
        invocation: InvocationInput,
        credential: FeedCredential | None = None,
        branch: str | None = None,
        trigger: SourceChange | None = None,
    ) -> PipelineRun:
        """Execute one build run and record it in the run history.

        Args:
            invocation: Version inputs and the publish toggle
            credential: Feed credential, needed only if the gate opens
            branch: Branch to check out (defaults to the default branch)
            trigger: Source change that started the run, if any

        Returns:
            The recorded run, succeeded or failed

        Raises:
            ConcurrencyViolation: If another build is running
        """
        counter = invocation.build_counter
        if counter is None:
            counter = self.history.next_build_counter(self.pipeline_id)
        else:
            self.history.observe_counter(self.pipeline_id, counter)
        run = PipelineRun(
            run_id=generate_run_id(counter),
            pipeline_id=self.pipeline_id,
            build_counter=counter,
        )
        if trigger is not None:
            logger.info("Build triggered by %s on %s", trigger.revision or "change", trigger.branch)

        with pipeline_lock(self.state_dir, self.pipeline_id, run.run_id):
            run.start()
            try:
                artifacts = self._execute(
                    run, invocation, credential, branch or self.default_branch
                )
                retained = [a for a in artifacts if self.artifact_rules.accepts(a.file_name)]
                self._retain(run, retained)
            except PipelineError as e:
                logger.error("Build %s failed: %s", run.run_id, e)
                run.fail(str(e), e.exit_code)
                self.history.record(run)
                return run

            run.succeed(retained)
            self.history.record(run)
        logger.info("Build %s succeeded (%s)", run.run_id, run.version)
        return run

    def _retain(self, run: PipelineRun, artifacts: list[Artifact]) -> None:
        files = {a.file_name: self.packager.output_dir / a.file_name for a in artifacts}
        try:
            self.history.retain_artifacts(run, files)
        except OSError as e:
            raise WorkspaceError(f"Cannot retain artifacts of run {run.run_id}: {e}") from e

    def _execute(
        self,
        run: PipelineRun,
        invocation: InvocationInput,
        credential: FeedCredential | None,
        branch: str,
    ) -> list[Artifact]:
        self._enter(run, Stage.TRIGGERED)
        source = checkout(
            self.workspace,
            self.project_root,
            url=self.vcs_url,
            branch=branch,
            clean=self.clean_checkout,
        )

        self._enter(run, Stage.VERSIONING)
        assert run.build_counter is not None
        versions = self.resolve_versions(invocation, run.build_counter)
        run.version = versions[0].render()

        self._enter(run, Stage.PACKAGING)
        artifacts = [self.packager.pack(source, version) for version in versions]

        pre_release = [a for a in artifacts if a.is_pre_release]
        if should_publish(invocation.should_publish) and pre_release:
            self._enter(run, Stage.PUBLISHING)
            paths = [self.packager.output_dir / a.file_name for a in pre_release]
            self.pusher.push(paths, credential)
            run.published = True
        else:
            if invocation.should_publish:
                logger.info("No pre-release package to publish")
            self._enter(run, Stage.PUBLISH_SKIPPED)
        return artifacts
