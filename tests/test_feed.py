"""Tests for the feed pusher."""

import json
from pathlib import Path

import pytest

from nupipe.errors import PublishError
from nupipe.models import FeedCredential
from nupipe.services.feed import FeedPusher


@pytest.fixture
def package(tmp_path: Path) -> Path:
    path = tmp_path / "Pkg.2.0.0-pre.1.nupkg"
    path.write_bytes(b"zip")
    return path


class TestFeedPusher:
    """Tests for FeedPusher.push."""

    def test_runs_command_per_artifact(
        self, tmp_path: Path, package: Path, credential: FeedCredential
    ) -> None:
        log = tmp_path / "pushed.txt"
        second = tmp_path / "Pkg.2.0.0.1.nupkg"
        second.write_bytes(b"zip")
        pusher = FeedPusher(f"sh -c 'echo \"$1 $2\" >> {log}' push {{artifact}} {{endpoint}}")

        pusher.push([package, second], credential)

        assert log.read_text().splitlines() == [
            f"{package} https://feed.example",
            f"{second} https://feed.example",
        ]

    def test_exports_endpoint_credentials(
        self, tmp_path: Path, package: Path, credential: FeedCredential
    ) -> None:
        out = tmp_path / "env.json"
        pusher = FeedPusher(f"sh -c 'printenv VSS_NUGET_EXTERNAL_FEED_ENDPOINTS > {out}'")

        pusher.push([package], credential)

        data = json.loads(out.read_text())
        assert data["endpointCredentials"][0]["password"] == "s3cret"

    def test_failure_raises_publish_error(
        self, package: Path, credential: FeedCredential
    ) -> None:
        with pytest.raises(PublishError, match="exited with code 1"):
            FeedPusher("false {artifact}").push([package], credential)

    def test_api_key_redacted_from_errors(
        self, package: Path, credential: FeedCredential
    ) -> None:
        pusher = FeedPusher("sh -c 'echo denied for $0 >&2; exit 1' {api_key}")
        with pytest.raises(PublishError) as exc_info:
            pusher.push([package], credential)
        assert "s3cret" not in str(exc_info.value)
        assert "***" in str(exc_info.value)

    def test_requires_credential(self, package: Path) -> None:
        with pytest.raises(PublishError, match="No feed credential"):
            FeedPusher("true").push([package], None)

    def test_requires_artifacts(self, credential: FeedCredential) -> None:
        with pytest.raises(PublishError, match="No artifacts selected"):
            FeedPusher("true").push([], credential)
