"""Prefix validation and name rewriting."""

PREFIX_SEPARATOR = "_"


def validate_prefix(prefix: str) -> str:
    """Validate a plugin prefix.

    Prefixed names end up as Jinja2 filter and tag names, so the prefix must
    be usable as an identifier on its own.

    Raises:
        ValueError: If the prefix is empty or not an identifier
    """
    if not isinstance(prefix, str) or not prefix.isidentifier():
        raise ValueError(f"Invalid plugin prefix: {prefix!r}")
    return prefix


def prefixed_name(prefix: str, name: str) -> str:
    """Return ``<prefix>_<name>``."""
    return f"{prefix}{PREFIX_SEPARATOR}{name}"
