"""Feed credential resolution."""

import os
from collections.abc import Mapping

from ..models import FeedCredential


def resolve_credential(
    endpoint: str,
    username: str,
    credential_ref: str,
    environ: Mapping[str, str] | None = None,
) -> FeedCredential | None:
    """Build a credential from the environment variable named by credential_ref.

    Returns None when the variable is unset or empty; the caller decides
    whether a push needs it.
    """
    env = os.environ if environ is None else environ
    token = env.get(credential_ref, "").strip()
    if not token:
        return None
    return FeedCredential(endpoint=endpoint, username=username, token=token)
