"""Decision point for pushing freshly built pre-release packages."""


def should_publish(flag: bool) -> bool:
    """Return the externally configured publish toggle unchanged.

    String toggles ("true", "false") must be parsed by the caller.
    """
    if not isinstance(flag, bool):
        raise TypeError(f"Publish flag must be a bool, got {type(flag).__name__}")
    return flag
