from __future__ import annotations

import re

from ..errors import MappingError

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def _validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that a table or column name derived from an entity class is a
    plain SQL identifier.

    Entity metadata is declared in code, so identifiers are trusted; this
    only catches typos and names no backend would accept unquoted.

    Args:
        name: The identifier to validate
        identifier_type: Description of the identifier (for error messages)

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        MappingError: If identifier is not a string, is empty, contains
            unsupported characters or exceeds 64 characters

    Example:
        >>> _validate_identifier("users", "table")
        'users'
        >>> _validate_identifier("user id", "column")
        MappingError: Invalid column 'user id': ...
    """
    if not isinstance(name, str):
        raise MappingError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise MappingError(f"{identifier_type} cannot be empty")

    if not _IDENTIFIER_RE.match(name):
        raise MappingError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > 64:
        raise MappingError(f"{identifier_type} {name!r} exceeds the 64-character limit")

    return name


def to_snake_case(name: str) -> str:
    """
    >>> to_snake_case("BlogPost")
    'blog_post'
    >>> to_snake_case("HTTPLog")
    'http_log'
    """
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()
