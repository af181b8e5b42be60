"""Tests for the build pipeline."""

from pathlib import Path
from unittest import mock

import pytest
from conftest import FakePusher

from nupipe.config import load_config
from nupipe.core.artifact_filter import ArtifactRules
from nupipe.core.lock_manager import acquire_lock, get_current_lock, release_lock
from nupipe.core.project import Project, create_project
from nupipe.errors import ConcurrencyViolation
from nupipe.models import FeedCredential, RunStatus, Stage
from nupipe.services.feed import FeedPusher


class TestBuildRun:
    """Tests for BuildPipeline.run."""

    def test_builds_both_packages_without_publishing(
        self, project: Project, pusher: FakePusher
    ) -> None:
        invocation = project.make_invocation(build_counter=345, should_publish=False)

        run = project.build.run(invocation)

        assert run.status is RunStatus.SUCCEEDED
        assert run.version == "2.0.0-pre.345"
        assert [a.file_name for a in run.artifacts] == [
            "Test.Installer.2.0.0-pre.345.nupkg",
            "Test.Installer.2.0.0.345.nupkg",
        ]
        assert Stage.PUBLISH_SKIPPED in run.stages
        assert Stage.PUBLISHING not in run.stages
        assert pusher.calls == []
        assert not run.published

    def test_publishes_only_pre_release(
        self, project: Project, pusher: FakePusher, credential: FeedCredential
    ) -> None:
        invocation = project.make_invocation(build_counter=5, should_publish=True)

        run = project.build.run(invocation, credential=credential)

        assert run.status is RunStatus.SUCCEEDED
        assert run.published
        assert len(pusher.calls) == 1
        assert [p.name for p in pusher.calls[0]] == ["Test.Installer.2.0.0-pre.5.nupkg"]

    def test_no_label_builds_release_only(self, project: Project, pusher: FakePusher) -> None:
        invocation = project.make_invocation(
            build_counter=2, pre_release_label="", should_publish=True
        )

        run = project.build.run(invocation)

        assert [a.file_name for a in run.artifacts] == ["Test.Installer.2.0.0.2.nupkg"]
        assert pusher.calls == []
        assert Stage.PUBLISH_SKIPPED in run.stages

    def test_counter_comes_from_history(self, project: Project) -> None:
        invocation = project.make_invocation(should_publish=False)

        first = project.build.run(invocation)
        second = project.build.run(invocation)

        assert first.build_counter == 1
        assert second.build_counter == 2
        assert second.version == "2.0.0-pre.2"

    def test_run_is_recorded_with_artifact_files(self, project: Project) -> None:
        run = project.build.run(project.make_invocation(build_counter=1, should_publish=False))

        recorded = project.history.last_successful("build")

        assert recorded is not None
        assert recorded.run_id == run.run_id
        for artifact in recorded.artifacts:
            assert project.history.artifact_path(recorded, artifact).is_file()

    def test_stages_in_order(self, project: Project) -> None:
        run = project.build.run(project.make_invocation(build_counter=1, should_publish=False))
        assert run.stages == [
            Stage.TRIGGERED,
            Stage.VERSIONING,
            Stage.PACKAGING,
            Stage.PUBLISH_SKIPPED,
            Stage.SUCCEEDED,
        ]
        assert not project.build.busy


class TestBuildFailures:
    """Failures are recorded on the run and stop the pipeline."""

    def test_publish_failure_fails_run(
        self, project: Project, pusher: FakePusher, credential: FeedCredential
    ) -> None:
        pusher.fail = True

        run = project.build.run(
            project.make_invocation(build_counter=1, should_publish=True), credential=credential
        )

        assert run.status is RunStatus.FAILED
        assert run.exit_code == 4
        assert run.artifacts == []
        assert project.history.last_successful("build") is None

    def test_packaging_failure_skips_publish(
        self, project_dir: Path, project: Project, pusher: FakePusher
    ) -> None:
        (project_dir / "Install.ps1").unlink()
        (project_dir / "modules" / "Helpers.psm1").unlink()

        run = project.build.run(project.make_invocation(build_counter=1, should_publish=True))

        assert run.status is RunStatus.FAILED
        assert run.exit_code == 3
        assert Stage.PUBLISHING not in run.stages
        assert pusher.calls == []

    def test_invalid_label(self, project: Project, pusher: FakePusher) -> None:
        run = project.build.run(
            project.make_invocation(build_counter=1, pre_release_label="bad label")
        )

        assert run.status is RunStatus.FAILED
        assert run.exit_code == 2
        assert Stage.PACKAGING not in run.stages
        assert [r.status for r in project.history.list_runs("build")] == [RunStatus.FAILED]

    def test_missing_credential_fails_publish(self, project: Project) -> None:
        project.build.pusher = FeedPusher("true {artifact}")

        run = project.build.run(project.make_invocation(build_counter=1, should_publish=True))

        assert run.status is RunStatus.FAILED
        assert run.exit_code == 4
        assert "No feed credential" in (run.error or "")


class TestWorkspace:
    """The workspace is rebuilt for every run."""

    def test_leftovers_are_not_packed(self, project: Project) -> None:
        project.build.workspace.mkdir(parents=True)
        (project.build.workspace / "src").mkdir()
        (project.build.workspace / "src" / "Stale.ps1").write_text("old")

        run = project.build.run(project.make_invocation(build_counter=1, should_publish=False))

        assert run.status is RunStatus.SUCCEEDED
        assert not (project.build.workspace / "src" / "Stale.ps1").exists()

    def test_artifact_rules_limit_retained_files(self, project_dir: Path) -> None:
        project = create_project(load_config(project_dir / ".nupipe"), project_dir)
        project.build.artifact_rules = ArtifactRules.parse(["-:**/*-pre*.nupkg", "+:**/*.nupkg"])

        run = project.build.run(project.make_invocation(build_counter=1, should_publish=False))

        assert [a.file_name for a in run.artifacts] == ["Test.Installer.2.0.0.1.nupkg"]


class TestBuildCounter:
    """Explicit and automatic counters never repeat a version."""

    def test_automatic_counter_continues_after_explicit_one(self, project: Project) -> None:
        explicit = project.build.run(project.make_invocation(build_counter=5, should_publish=False))
        automatic = project.build.run(project.make_invocation(should_publish=False))

        assert explicit.version == "2.0.0-pre.5"
        assert automatic.build_counter == 6
        assert automatic.version == "2.0.0-pre.6"


class TestBuildExclusion:
    """Only one build uses the workspace at a time."""

    def test_overlapping_build_is_rejected(
        self, project: Project, pusher: FakePusher, credential: FeedCredential
    ) -> None:
        rejected: list[ConcurrencyViolation] = []

        def overlap() -> None:
            pusher.on_push = None
            try:
                project.build.run(project.make_invocation(build_counter=2, should_publish=False))
            except ConcurrencyViolation as e:
                rejected.append(e)

        pusher.on_push = overlap

        run = project.build.run(
            project.make_invocation(build_counter=1, should_publish=True), credential=credential
        )

        assert run.status is RunStatus.SUCCEEDED
        assert len(rejected) == 1
        recorded = project.history.last_successful("build")
        assert recorded is not None
        assert recorded.run_id == run.run_id
        for artifact in recorded.artifacts:
            assert project.history.artifact_path(recorded, artifact).is_file()
        assert get_current_lock(project.state_dir, "build") is None

    def test_busy_while_lock_held(self, project: Project) -> None:
        lock = acquire_lock(project.state_dir, "build", "other-run")
        assert project.build.busy
        with pytest.raises(ConcurrencyViolation, match="other-run"):
            project.build.run(project.make_invocation(build_counter=1, should_publish=False))
        release_lock(project.state_dir, lock)
        assert not project.build.busy
        assert project.history.list_runs("build") == []

    def test_retain_failure_fails_run(self, project: Project) -> None:
        with mock.patch.object(
            project.history, "retain_artifacts", side_effect=OSError("disk full")
        ):
            run = project.build.run(project.make_invocation(build_counter=1, should_publish=False))

        assert run.status is RunStatus.FAILED
        assert run.exit_code == 1
        assert "disk full" in (run.error or "")
        assert [r.status for r in project.history.list_runs("build")] == [RunStatus.FAILED]
