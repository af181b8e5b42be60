"""Shared test fixtures for nupipe tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from nupipe.config import load_config
from nupipe.core.project import Project, create_project
from nupipe.errors import PublishError
from nupipe.models import FeedCredential

CONFIG = """[project]
name = "Test.Installer"
base_version = "2.0.0"
pre_release_label = "pre"

[build]
artifact_rules = ["**/Test.Installer*.nupkg"]
quiet_period = 0

[feed]
endpoint = "https://feed.example/v3/index.json"
username = "agent"
token_env = "TEST_FEED_TOKEN"
push_command = "true {artifact} {endpoint} {api_key}"
"""


class FakePusher:
    """Records pushes instead of running a push command."""

    def __init__(
        self,
        fail: bool = False,
        on_push: Callable[[], None] | None = None,
    ) -> None:
        self.fail = fail
        self.on_push = on_push
        self.calls: list[list[Path]] = []

    def push(self, paths: list[Path], credential: FeedCredential | None) -> None:
        self.calls.append(list(paths))
        if self.on_push is not None:
            self.on_push()
        if self.fail:
            raise PublishError("push exited with code 1")


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project tree with installer scripts and a .nupipe config."""
    root = tmp_path / "repo"
    (root / "modules").mkdir(parents=True)
    (root / "Install.ps1").write_text("Write-Host 'install'\n")
    (root / "modules" / "Helpers.psm1").write_text("function Get-Thing { 1 }\n")
    (root / "README.md").write_text("# not packed\n")
    state_dir = root / ".nupipe"
    state_dir.mkdir()
    (state_dir / "config.toml").write_text(CONFIG)
    return root


@pytest.fixture
def pusher() -> FakePusher:
    return FakePusher()


@pytest.fixture
def project(project_dir: Path, pusher: FakePusher) -> Project:
    """Project wired to a fake feed pusher."""
    config = load_config(project_dir / ".nupipe")
    return create_project(config, project_dir, pusher=pusher)  # type: ignore[arg-type]


@pytest.fixture
def credential() -> FeedCredential:
    return FeedCredential(endpoint="https://feed.example", username="agent", token="s3cret")
