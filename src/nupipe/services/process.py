"""External command runner shared by the packaging and feed collaborators."""

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping
from pathlib import Path

from ..errors import PipelineError

logger = logging.getLogger(__name__)


def render_command(template: str, values: Mapping[str, object]) -> list[str]:
    """Split a command template and fill {placeholders} in each argument.

    Placeholders are substituted after splitting, so values containing spaces
    stay a single argument.
    """
    try:
        args = shlex.split(template)
    except ValueError as e:
        raise PipelineError(f"Invalid command syntax: {e}") from e
    if not args:
        raise PipelineError("Empty command")
    try:
        return [arg.format_map(values) for arg in args]
    except (KeyError, IndexError) as e:
        raise PipelineError(f"Unknown placeholder in command {template!r}: {e}") from e


def run_command(
    args: list[str],
    cwd: Path,
    timeout: int,
    error_class: type[PipelineError],
    env: Mapping[str, str] | None = None,
    redact: tuple[str, ...] = (),
) -> subprocess.CompletedProcess[str]:
    """Run an opaque external command with a success/failure contract.

    Args:
        args: Command and arguments
        cwd: Working directory
        timeout: Timeout in seconds
        error_class: Error raised on non-zero exit, timeout or missing executable
        env: Extra environment variables for the child process
        redact: Secret values masked in logs and error messages

    Returns:
        The completed process (exit code 0)
    """

    def _mask(text: str) -> str:
        for secret in redact:
            if secret:
                text = text.replace(secret, "***")
        return text

    shown = _mask(shlex.join(args))
    logger.debug("Running: %s", shown)
    child_env = {**os.environ, **env} if env else None

    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=child_env,
        )
    except subprocess.TimeoutExpired as e:
        raise error_class(f"{args[0]} timed out after {timeout} seconds") from e
    except FileNotFoundError:
        raise error_class(f"Command not found: {args[0]}") from None

    if result.returncode != 0:
        detail = _mask((result.stderr or result.stdout).strip())[-500:]
        raise error_class(f"{shown} exited with code {result.returncode}: {detail}")
    return result
