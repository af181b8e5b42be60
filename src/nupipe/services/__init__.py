"""External collaborators: processes, git, package files, feeds, workspaces."""

from .credentials import resolve_credential
from .feed import FeedPusher
from .git import GitError, clone, get_branch_head, run_git
from .nupkg import collect_sources, render_nuspec, write_nupkg
from .process import render_command, run_command
from .workspace import checkout, reset_workspace

__all__ = [
    "FeedPusher",
    "GitError",
    "checkout",
    "clone",
    "collect_sources",
    "get_branch_head",
    "render_command",
    "render_nuspec",
    "reset_workspace",
    "resolve_credential",
    "run_command",
    "run_git",
    "write_nupkg",
]
