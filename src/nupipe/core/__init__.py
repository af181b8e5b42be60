"""Core pipeline logic for nupipe.

- version_policy: base version + counter + label -> Version
- packager: sources + Version -> Artifact
- publish_gate: pre-release publish decision
- artifact_filter: include/exclude artifact rules
- trigger: branch filter and quiet-period debounce
- lock_manager: release mutual exclusion
- run_history: run records and build counters
- build_pipeline / release_pipeline: the two pipelines
- project: config -> wired pipelines
- watcher: source polling loop
"""

from .artifact_filter import ArtifactRules, filter_names, matches
from .build_pipeline import BuildPipeline
from .lock_manager import (
    acquire_lock,
    is_locked,
    pipeline_lock,
    release_lock,
    update_heartbeat,
)
from .packager import ArtifactPackager
from .project import Project, create_project, find_project_root, load_project
from .publish_gate import should_publish
from .release_pipeline import ReleasePipeline
from .run_history import FileRunHistory, RunHistory, generate_run_id
from .trigger import BranchFilter, QuietPeriodTrigger
from .version_policy import resolve
from .watcher import watch_source

__all__ = [
    "ArtifactPackager",
    "ArtifactRules",
    "BranchFilter",
    "BuildPipeline",
    "FileRunHistory",
    "Project",
    "QuietPeriodTrigger",
    "ReleasePipeline",
    "RunHistory",
    "acquire_lock",
    "create_project",
    "filter_names",
    "find_project_root",
    "generate_run_id",
    "is_locked",
    "load_project",
    "matches",
    "pipeline_lock",
    "release_lock",
    "resolve",
    "should_publish",
    "update_heartbeat",
    "watch_source",
]
