"""Tests for the publish gate."""

import pytest

from nupipe.core.publish_gate import should_publish


def test_passes_true_through() -> None:
    assert should_publish(True) is True


def test_passes_false_through() -> None:
    assert should_publish(False) is False


@pytest.mark.parametrize("flag", ["true", "false", 1, None])
def test_rejects_non_bool(flag: object) -> None:
    """String toggles must be parsed before reaching the gate."""
    with pytest.raises(TypeError):
        should_publish(flag)  # type: ignore[arg-type]
