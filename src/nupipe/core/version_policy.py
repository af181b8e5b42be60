"""Version policy: base version + build counter + optional label -> Version."""

import re

from ..errors import InvalidVersionFormat
from ..models import Version

_BASE_RE = re.compile(r"^\d+\.\d+\.\d+$")
_LABEL_RE = re.compile(r"^[0-9A-Za-z-]+$")


def resolve(base: str, counter: int, label: str | None = None) -> Version:
    """Resolve the version for one pipeline invocation.

    The counter is supplied by the caller (CI build counter or run history),
    never generated here, so the same inputs always give the same version.

    Args:
        base: Three-component numeric version, e.g. "2.0.0"
        counter: Build counter, >= 0
        label: Pre-release label; empty or blank means no label

    Returns:
        Version rendering as base-label.counter or base.counter

    Raises:
        InvalidVersionFormat: If base, counter or label is malformed
    """
    if not isinstance(base, str) or not _BASE_RE.match(base):
        raise InvalidVersionFormat(f"Base version must be major.minor.patch, got {base!r}")
    if isinstance(counter, bool) or not isinstance(counter, int) or counter < 0:
        raise InvalidVersionFormat(f"Build counter must be a non-negative integer, got {counter!r}")

    if label is not None:
        label = label.strip() or None
    if label is not None and not _LABEL_RE.match(label):
        raise InvalidVersionFormat(
            f"Pre-release label may only contain [0-9A-Za-z-], got {label!r}"
        )

    return Version(base=base, build_counter=counter, pre_release_label=label)
