"""Tests for workspace reset and checkout."""

from pathlib import Path
from unittest.mock import patch

import pytest

from nupipe.errors import WorkspaceError
from nupipe.services.git import GitError
from nupipe.services.workspace import checkout, reset_workspace


def test_reset_removes_leftovers(tmp_path: Path) -> None:
    workspace = tmp_path / "work"
    workspace.mkdir()
    (workspace / "stale.nupkg").write_text("old")

    reset_workspace(workspace)

    assert workspace.is_dir()
    assert list(workspace.iterdir()) == []


class TestCheckout:
    """Tests for checkout."""

    def test_copies_project_without_state(self, project_dir: Path) -> None:
        (project_dir / ".git").mkdir()
        workspace = project_dir / ".nupipe" / "work" / "build"

        source = checkout(workspace, project_dir)

        assert (source / "Install.ps1").is_file()
        assert (source / "modules" / "Helpers.psm1").is_file()
        assert not (source / ".nupipe").exists()
        assert not (source / ".git").exists()

    def test_workspace_inside_project_is_not_copied(self, tmp_path: Path) -> None:
        root = tmp_path / "repo"
        root.mkdir()
        (root / "a.ps1").write_text("x")
        workspace = root / "build-work"

        source = checkout(workspace, root)

        assert (source / "a.ps1").is_file()
        assert not (source / "build-work").exists()

    def test_clean_checkout_wipes_previous_files(self, project_dir: Path, tmp_path: Path) -> None:
        workspace = tmp_path / "work"
        workspace.mkdir()
        (workspace / "leftover.txt").write_text("x")

        checkout(workspace, project_dir, clean=True)

        assert not (workspace / "leftover.txt").exists()

    def test_dirty_checkout_keeps_previous_files(self, project_dir: Path, tmp_path: Path) -> None:
        workspace = tmp_path / "work"
        workspace.mkdir()
        (workspace / "leftover.txt").write_text("x")

        checkout(workspace, project_dir, clean=False)

        assert (workspace / "leftover.txt").exists()

    def test_clone_when_url_given(self, tmp_path: Path) -> None:
        with patch("nupipe.services.workspace.clone") as mock_clone:
            source = checkout(tmp_path / "work", tmp_path, url="https://git/repo", branch="dev")
        mock_clone.assert_called_once_with("https://git/repo", "dev", source)

    def test_clone_failure(self, tmp_path: Path) -> None:
        with (
            patch("nupipe.services.workspace.clone", side_effect=GitError("auth failed")),
            pytest.raises(WorkspaceError, match="auth failed"),
        ):
            checkout(tmp_path / "work", tmp_path, url="https://git/repo")
