from __future__ import annotations

import re

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_LOGICAL_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

MAX_IDENTIFIER_LENGTH = 64


def _validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Check that a table name is safe to hand to SQLAlchemy DDL.

    Identifiers must come from configuration, never from end-user input;
    this check rejects typos and quoting tricks, not hostile callers.

    Raises:
        TypeError: If name is not a string
        ValueError: If name is empty, too long, or not [A-Za-z_][A-Za-z0-9_]*

    Example:
        >>> _validate_identifier("dvtx_records", "table_name")
        'dvtx_records'
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise ValueError(f"{identifier_type} {name!r} exceeds the {MAX_IDENTIFIER_LENGTH}-character limit")
    return name


def _validate_logical_name(name: str) -> str:
    """Logical names (e.g. "account") are lowercase identifiers."""
    if not isinstance(name, str) or not name:
        raise ValueError("logical name cannot be empty")
    if not _LOGICAL_NAME_RE.match(name):
        raise ValueError(f"Invalid logical name {name!r}")
    return name
