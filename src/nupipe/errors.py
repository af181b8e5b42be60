"""Pipeline errors.

Every error carries the process exit code the CLI reports for it.
"""

from .constants import (
    EXIT_CONCURRENCY_VIOLATION,
    EXIT_ERROR,
    EXIT_INVALID_VERSION,
    EXIT_NO_SOURCE_RUN,
    EXIT_PACKAGING_FAILED,
    EXIT_PUBLISH_FAILED,
)


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    exit_code = EXIT_ERROR


class InvalidVersionFormat(PipelineError):
    """Base version, build counter or label cannot form a version."""

    exit_code = EXIT_INVALID_VERSION


class PackagingError(PipelineError):
    """Packaging step failed or required sources are missing."""

    exit_code = EXIT_PACKAGING_FAILED


class PublishError(PipelineError):
    """Pushing artifacts to a feed failed."""

    exit_code = EXIT_PUBLISH_FAILED


class ConcurrencyViolation(PipelineError):
    """Another release is already running."""

    exit_code = EXIT_CONCURRENCY_VIOLATION


class SourceNotFoundError(PipelineError):
    """No successful build run to release from."""

    exit_code = EXIT_NO_SOURCE_RUN


class RunStateError(PipelineError):
    """Illegal run status transition."""


class WorkspaceError(PipelineError):
    """Workspace could not be reset or checked out."""
