"""Tests for nupipe data models."""

import pytest
from pydantic import ValidationError

from nupipe.core.version_policy import resolve
from nupipe.errors import RunStateError
from nupipe.models import (
    Artifact,
    FeedCredential,
    InvocationInput,
    PipelineRun,
    RunStatus,
    Stage,
    Version,
    artifact_file_name,
)


def make_artifact() -> Artifact:
    version = resolve("2.0.0", 5, "pre")
    return Artifact(
        name="Pkg",
        version=version,
        file_name=artifact_file_name("Pkg", version),
        payload=b"data",
        sha256="abc",
        is_pre_release=True,
    )


class TestVersion:
    """Tests for the Version model."""

    def test_file_name_convention(self) -> None:
        assert artifact_file_name("Pkg", resolve("2.0.0", 5, "pre")) == "Pkg.2.0.0-pre.5.nupkg"
        assert artifact_file_name("Pkg", resolve("2.0.0", 5)) == "Pkg.2.0.0.5.nupkg"

    def test_is_immutable(self) -> None:
        version = resolve("2.0.0", 5)
        with pytest.raises(ValidationError):
            version.build_counter = 6  # type: ignore[misc]

    def test_semantic_order_beats_lexical(self) -> None:
        """2.0.0.10 sorts after 2.0.0.9 even though it is lexically smaller."""
        assert resolve("2.0.0", 9) < resolve("2.0.0", 10)

    def test_blank_label_is_no_label(self) -> None:
        version = Version(base="2.0.0", build_counter=4, pre_release_label="  ")
        assert version.pre_release_label is None
        assert not version.is_pre_release
        assert version.render() == "2.0.0.4"

    def test_rejects_bad_base_directly(self) -> None:
        with pytest.raises(ValidationError):
            Version(base="2.0", build_counter=1)


class TestArtifact:
    """Tests for the Artifact model."""

    def test_payload_not_serialized(self) -> None:
        data = make_artifact().model_dump()
        assert "payload" not in data
        assert data["file_name"] == "Pkg.2.0.0-pre.5.nupkg"


class TestPipelineRun:
    """Tests for run status transitions."""

    def test_happy_path(self) -> None:
        run = PipelineRun(run_id="r", pipeline_id="build")
        assert run.status is RunStatus.PENDING
        run.start()
        run.succeed([make_artifact()])
        assert run.status is RunStatus.SUCCEEDED
        assert run.stages[-1] is Stage.SUCCEEDED
        assert len(run.visible_artifacts) == 1

    def test_artifacts_hidden_until_succeeded(self) -> None:
        run = PipelineRun(run_id="r", pipeline_id="build", artifacts=[make_artifact()])
        run.start()
        assert run.visible_artifacts == []

    def test_terminal_states_are_final(self) -> None:
        run = PipelineRun(run_id="r", pipeline_id="build")
        run.start()
        run.fail("boom", 3)
        with pytest.raises(RunStateError):
            run.start()
        with pytest.raises(RunStateError):
            run.fail("again", 3)
        with pytest.raises(RunStateError):
            run.succeed()

    def test_cannot_succeed_without_running(self) -> None:
        with pytest.raises(RunStateError):
            PipelineRun(run_id="r", pipeline_id="build").succeed()

    def test_fail_drops_artifacts(self) -> None:
        run = PipelineRun(run_id="r", pipeline_id="build", artifacts=[make_artifact()])
        run.start()
        run.fail("boom", 4)
        assert run.artifacts == []
        assert run.exit_code == 4
        assert run.error == "boom"


class TestInvocationInput:
    """Tests for invocation parsing."""

    def test_accepts_camel_case_keys(self) -> None:
        invocation = InvocationInput.model_validate(
            {
                "baseVersion": "2.0.0",
                "buildCounter": 345,
                "preReleaseLabel": "pre",
                "shouldPublish": "true",
                "feedEndpoint": "https://feed",
                "feedCredentialRef": "TOKEN",
            }
        )
        assert invocation.build_counter == 345
        assert invocation.should_publish is True

    def test_rejects_negative_counter(self) -> None:
        with pytest.raises(ValidationError):
            InvocationInput(base_version="2.0.0", build_counter=-1)


class TestFeedCredential:
    """Tests for FeedCredential."""

    def test_token_hidden_in_repr(self) -> None:
        credential = FeedCredential(endpoint="https://feed", username="u", token="s3cret")
        assert "s3cret" not in repr(credential)
        assert credential.api_key() == "s3cret"

    def test_external_endpoints_json(self) -> None:
        credential = FeedCredential(endpoint="https://feed", username="u", token="s3cret")
        assert '"password": "s3cret"' in credential.external_endpoints_json()
        assert '"endpoint": "https://feed"' in credential.external_endpoints_json()
