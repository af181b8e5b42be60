"""Release pipeline: promote the last successful build to the production feed.

Only one release runs at a time; an overlapping invocation fails with
ConcurrencyViolation before anything is recorded.
"""

import logging
from pathlib import Path

from ..errors import PipelineError, PublishError, SourceNotFoundError
from ..models import Artifact, FeedCredential, PipelineRun, Stage
from ..services.feed import FeedPusher
from .artifact_filter import ArtifactRules
from .lock_manager import pipeline_lock, update_heartbeat
from .run_history import RunHistory, generate_run_id

logger = logging.getLogger(__name__)


class ReleasePipeline:
    """Republishes the release artifacts of the latest good build."""

    def __init__(
        self,
        pipeline_id: str,
        source_pipeline_id: str,
        state_dir: Path,
        history: RunHistory,
        pusher: FeedPusher,
        rules: ArtifactRules,
    ) -> None:
        self.pipeline_id = pipeline_id
        self.source_pipeline_id = source_pipeline_id
        self.state_dir = state_dir
        self.history = history
        self.pusher = pusher
        self.rules = rules

    def select_source(self) -> PipelineRun:
        """The last successful run of the source build pipeline."""
        source = self.history.last_successful(self.source_pipeline_id)
        if source is None:
            raise SourceNotFoundError(f"No successful {self.source_pipeline_id} run to release")
        return source

    def filter_artifacts(self, run: PipelineRun) -> list[Artifact]:
        """Artifacts of the run accepted by the include/exclude rules."""
        return [a for a in run.visible_artifacts if self.rules.accepts(a.file_name)]

    def publish(
        self,
        source: PipelineRun,
        artifacts: list[Artifact],
        credential: FeedCredential | None,
    ) -> None:
        """Push the selected artifacts; any failure fails the whole release."""
        paths = [self.history.artifact_path(source, a) for a in artifacts]
        missing = [p.name for p in paths if not p.is_file()]
        if missing:
            raise PublishError(f"Artifact files missing from run {source.run_id}: {missing}")
        self.pusher.push(paths, credential)

    def run(self, credential: FeedCredential | None) -> PipelineRun:
        """Execute one release.

        Raises:
            ConcurrencyViolation: If another release is running
        """
        run = PipelineRun(run_id=generate_run_id(), pipeline_id=self.pipeline_id)
        with pipeline_lock(self.state_dir, self.pipeline_id, run.run_id) as lock:
            run.start()
            try:
                run.enter(Stage.SELECTING)
                source = self.select_source()
                run.source_run_id = source.run_id
                run.build_counter = source.build_counter
                logger.info("Releasing from %s run %s", self.source_pipeline_id, source.run_id)

                run.enter(Stage.FILTERING)
                artifacts = self.filter_artifacts(source)
                for artifact in artifacts:
                    logger.debug("Selected %s", artifact.file_name)
                if artifacts:
                    run.version = artifacts[0].version.render()

                run.enter(Stage.PUBLISHING)
                update_heartbeat(self.state_dir, lock)
                self.publish(source, artifacts, credential)
                run.published = True
            except PipelineError as e:
                logger.error("Release %s failed: %s", run.run_id, e)
                run.fail(str(e), e.exit_code)
                self.history.record(run)
                return run

            run.succeed(artifacts)
            self.history.record(run)
        logger.info("Release %s succeeded", run.run_id)
        return run
