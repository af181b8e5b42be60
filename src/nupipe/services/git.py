"""Git operations for checkout and source watching."""

import subprocess
from pathlib import Path

from ..constants import GIT_TIMEOUT


class GitError(Exception):
    """Git command failed."""


def run_git(*args: str, cwd: Path | None = None, timeout: int = GIT_TIMEOUT) -> str:
    """Run git and return stripped stdout.

    Raises:
        GitError: If git fails, times out or is not installed
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {args[0]} timed out after {timeout} seconds") from e
    except FileNotFoundError:
        raise GitError("git not found in PATH") from None
    if result.returncode != 0:
        raise GitError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def clone(url: str, branch: str, dest: Path) -> None:
    """Shallow clone a single branch into dest."""
    run_git("clone", "--depth", "1", "--branch", branch, "--single-branch", url, str(dest))


def get_branch_head(branch: str, cwd: Path | None = None, url: str | None = None) -> str:
    """Return the revision a branch points at, locally or on a remote URL."""
    if url:
        out = run_git("ls-remote", url, f"refs/heads/{branch}", cwd=cwd)
        if not out:
            raise GitError(f"Branch not found on remote: {branch}")
        return out.split()[0]
    return run_git("rev-parse", f"refs/heads/{branch}", cwd=cwd)
