"""Run history: the record of pipeline runs and their build counters.

Pipelines never keep this state themselves; they are handed a RunHistory.
FileRunHistory keeps it under .nupipe/runs/<pipeline_id>/:

    counter                 last build counter handed out or used
    <run_id>/run.json       PipelineRun record
    <run_id>/artifacts/     files retained by a successful run
"""

import logging
import os
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from ..models import Artifact, PipelineRun, RunStatus

logger = logging.getLogger(__name__)


class RunHistory(Protocol):
    """Externally owned store of pipeline runs."""

    def next_build_counter(self, pipeline_id: str) -> int: ...

    def observe_counter(self, pipeline_id: str, counter: int) -> None: ...

    def retain_artifacts(self, run: PipelineRun, files: dict[str, Path]) -> None: ...

    def record(self, run: PipelineRun) -> None: ...

    def list_runs(self, pipeline_id: str) -> list[PipelineRun]: ...

    def last_successful(self, pipeline_id: str) -> PipelineRun | None: ...

    def artifact_path(self, run: PipelineRun, artifact: Artifact) -> Path: ...


def generate_run_id(counter: int | None = None) -> str:
    """Generate run ID in format YYYYMMDD-HHMMSS-ffffff[-<counter>]."""
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    return f"{timestamp}-{counter}" if counter is not None else timestamp


def _safe_id(pipeline_id: str) -> str:
    if not re.match(r"^[A-Za-z0-9_.-]+$", pipeline_id):
        raise ValueError(f"Invalid pipeline id: {pipeline_id!r}")
    return pipeline_id


class FileRunHistory:
    """RunHistory backed by the .nupipe/runs directory."""

    def __init__(self, state_dir: Path) -> None:
        self.runs_dir = state_dir / "runs"

    def _pipeline_dir(self, pipeline_id: str) -> Path:
        return self.runs_dir / _safe_id(pipeline_id)

    def run_dir(self, pipeline_id: str, run_id: str) -> Path:
        return self._pipeline_dir(pipeline_id) / run_id

    def _counter_path(self, pipeline_id: str) -> Path:
        pipeline_dir = self._pipeline_dir(pipeline_id)
        pipeline_dir.mkdir(parents=True, exist_ok=True)
        return pipeline_dir / "counter"

    def _read_counter(self, counter_path: Path) -> int:
        if not counter_path.exists():
            return 0
        text = counter_path.read_text().strip()
        return int(text) if text.isdigit() else 0

    def _write_counter(self, counter_path: Path, counter: int) -> None:
        tmp = counter_path.with_suffix(".tmp")
        tmp.write_text(str(counter))
        os.replace(tmp, counter_path)

    def next_build_counter(self, pipeline_id: str) -> int:
        """Hand out the next build counter (1, 2, 3...) for a pipeline."""
        counter_path = self._counter_path(pipeline_id)
        counter = self._read_counter(counter_path) + 1
        self._write_counter(counter_path, counter)
        return counter

    def observe_counter(self, pipeline_id: str, counter: int) -> None:
        """Note an externally supplied counter so later ones never repeat it."""
        counter_path = self._counter_path(pipeline_id)
        if counter > self._read_counter(counter_path):
            self._write_counter(counter_path, counter)

    def retain_artifacts(self, run: PipelineRun, files: dict[str, Path]) -> None:
        """Copy artifact files into the run's artifacts/ directory.

        Args:
            run: Run the files belong to
            files: Artifact file name -> file to copy

        Raises:
            OSError: If a file cannot be copied
        """
        artifacts_dir = self.run_dir(run.pipeline_id, run.run_id) / "artifacts"
        artifacts_dir.mkdir(parents=True, exist_ok=True)
        for file_name, source in files.items():
            shutil.copy2(source, artifacts_dir / file_name)

    def record(self, run: PipelineRun) -> None:
        """Persist a run as run.json."""
        run_dir = self.run_dir(run.pipeline_id, run.run_id)
        run_dir.mkdir(parents=True, exist_ok=True)
        (run_dir / "run.json").write_text(run.model_dump_json(indent=2))
        logger.debug("Recorded %s run %s (%s)", run.pipeline_id, run.run_id, run.status.value)

    def list_runs(self, pipeline_id: str) -> list[PipelineRun]:
        """All readable runs of a pipeline, newest first."""
        pipeline_dir = self._pipeline_dir(pipeline_id)
        if not pipeline_dir.exists():
            return []
        runs = []
        for run_dir in pipeline_dir.iterdir():
            run_json = run_dir / "run.json"
            if not run_json.is_file():
                continue
            try:
                runs.append(PipelineRun.model_validate_json(run_json.read_text()))
            except (ValidationError, OSError) as e:
                logger.warning("Skipping corrupt run %s: %s", run_dir.name, e)
        return sorted(runs, key=lambda r: (r.created_at, r.run_id), reverse=True)

    def last_successful(self, pipeline_id: str) -> PipelineRun | None:
        """Most recent succeeded run of a pipeline."""
        for run in self.list_runs(pipeline_id):
            if run.status is RunStatus.SUCCEEDED:
                return run
        return None

    def artifact_path(self, run: PipelineRun, artifact: Artifact) -> Path:
        return self.run_dir(run.pipeline_id, run.run_id) / "artifacts" / artifact.file_name
