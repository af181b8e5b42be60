"""Package feed push collaborator."""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..constants import FEED_ENDPOINTS_ENV, PUSH_TIMEOUT
from ..errors import PipelineError, PublishError
from ..models import FeedCredential
from .process import render_command, run_command

logger = logging.getLogger(__name__)


class FeedPusher:
    """Pushes package files to a feed with an external command.

    The command template may use {artifact}, {endpoint}, {api_key} and
    {username}. It runs once per file, in order, and the first non-zero exit
    stops the push with PublishError.
    """

    def __init__(self, command: str, timeout: int = PUSH_TIMEOUT) -> None:
        self.command = command
        self.timeout = timeout

    def push(self, paths: Sequence[Path], credential: FeedCredential | None) -> None:
        """Push every file in paths.

        Raises:
            PublishError: On missing credential, empty selection or push failure
        """
        if credential is None:
            raise PublishError("No feed credential available for publishing")
        if not paths:
            raise PublishError("No artifacts selected for publishing")

        env = {FEED_ENDPOINTS_ENV: credential.external_endpoints_json()}
        for path in paths:
            values = {
                "artifact": str(path),
                "endpoint": credential.endpoint,
                "api_key": credential.api_key(),
                "username": credential.username,
            }
            try:
                args = render_command(self.command, values)
            except PipelineError as e:
                raise PublishError(str(e)) from e
            run_command(
                args,
                cwd=path.parent,
                timeout=self.timeout,
                error_class=PublishError,
                env=env,
                redact=(credential.api_key(),),
            )
            logger.info("Pushed %s to %s", path.name, credential.endpoint)
