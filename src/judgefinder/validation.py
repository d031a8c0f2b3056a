"""
Input validation for identifiers and free-text queries.

Everything here runs before any store or cache call.
"""

from __future__ import annotations

import re

from src.judgefinder.errors import InvalidInputError

DEFAULT_MAX_IDENTIFIER_LENGTH = 200
DEFAULT_MAX_QUERY_LENGTH = 200

IDENTIFIER_PATTERN = re.compile(r"[a-z0-9]+(-[a-z0-9]+)*")

_DISALLOWED_QUERY_CHARS = re.compile(r"[^\w\s.,'&-]|_")
_WHITESPACE = re.compile(r"\s+")


def validate_identifier(
    identifier: object,
    max_length: int = DEFAULT_MAX_IDENTIFIER_LENGTH,
) -> str:
    """
    Check a lookup identifier and return it unchanged.

    Raises:
        InvalidInputError: empty, too long, or outside ``[a-z0-9-]`` form.
    """
    if not isinstance(identifier, str) or not identifier:
        raise InvalidInputError("Identifier is required", field="identifier")
    if len(identifier) > max_length:
        raise InvalidInputError(
            f"Identifier exceeds {max_length} characters", field="identifier"
        )
    if not IDENTIFIER_PATTERN.fullmatch(identifier):
        raise InvalidInputError(
            "Identifier must be lowercase letters and digits separated by single hyphens",
            field="identifier",
        )
    return identifier


def sanitize_query(query: str | None, max_length: int = DEFAULT_MAX_QUERY_LENGTH) -> str:
    """
    Normalize a free-text search query.

    Trims, drops characters other than letters, digits, whitespace and
    ``.,'&-``, then collapses whitespace runs. ``None`` is treated as empty.

    Raises:
        InvalidInputError: the raw query is longer than ``max_length``.
    """
    if query is None:
        return ""
    if len(query) > max_length:
        raise InvalidInputError(f"Query exceeds {max_length} characters", field="query")
    cleaned = _DISALLOWED_QUERY_CHARS.sub("", query)
    return _WHITESPACE.sub(" ", cleaned).strip()
