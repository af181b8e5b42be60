"""Workspace reset and checkout.

Every build starts from an empty workspace so nothing left by an earlier run
can end up in a package.
"""

import logging
import shutil
from pathlib import Path

from ..constants import STATE_DIR
from ..errors import WorkspaceError
from .git import GitError, clone

logger = logging.getLogger(__name__)


def reset_workspace(workspace: Path) -> Path:
    """Delete and recreate the workspace directory."""
    try:
        if workspace.exists():
            shutil.rmtree(workspace)
        workspace.mkdir(parents=True)
    except OSError as e:
        raise WorkspaceError(f"Cannot reset workspace {workspace}: {e}") from e
    return workspace


def checkout(
    workspace: Path,
    project_root: Path,
    url: str | None = None,
    branch: str = "main",
    clean: bool = True,
) -> Path:
    """Populate the workspace with the sources to build.

    Args:
        workspace: Directory the build runs in
        project_root: Local project tree, copied when no url is given
        url: Git URL to clone instead of copying
        branch: Branch to clone
        clean: Wipe the workspace first

    Returns:
        Path of the checked-out source tree inside the workspace
    """
    if clean:
        reset_workspace(workspace)
    else:
        workspace.mkdir(parents=True, exist_ok=True)

    source = workspace / "src"
    if source.exists():
        shutil.rmtree(source)

    if url:
        logger.info("Cloning %s (%s)", url, branch)
        try:
            clone(url, branch, source)
        except GitError as e:
            raise WorkspaceError(str(e)) from e
        return source

    workspace_resolved = workspace.resolve()

    def _ignore(directory: str, names: list[str]) -> list[str]:
        ignored = [n for n in names if n in (".git", STATE_DIR)]
        ignored += [n for n in names if (Path(directory) / n).resolve() == workspace_resolved]
        return ignored

    logger.info("Copying %s into workspace", project_root)
    try:
        shutil.copytree(project_root, source, ignore=_ignore)
    except OSError as e:
        raise WorkspaceError(f"Cannot copy sources: {e}") from e
    return source
