"""
Record Store Protocol

Uses typing.Protocol for duck-typed interface definitions.
No inheritance required - any class implementing these methods qualifies.

A store serves one table (judges or courts) and returns plain row mappings;
the engines map rows into entities. Implementations raise
BackendUnavailableError for transport failures and never return partial
results silently.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

Row = Mapping[str, Any]

JUDGE_COLUMNS = (
    "id",
    "name",
    "slug",
    "court_name",
    "jurisdiction",
    "total_cases",
    "profile_image_url",
)
COURT_COLUMNS = ("id", "name", "type", "jurisdiction", "judge_count")


@runtime_checkable
class RecordStore(Protocol):
    """Read-only query surface over one table of directory records."""

    async def find_by_exact_field(self, field: str, value: str) -> list[Row]:
        """Rows whose ``field`` equals ``value`` exactly."""
        ...

    async def find_by_substring(self, field: str, value: str, limit: int) -> list[Row]:
        """
        Rows whose ``field`` contains ``value``, case-insensitively.

        Ordered by ``field`` then ``id``.
        """
        ...

    async def find_by_any_sequence(
        self,
        field: str,
        sequences: Sequence[Sequence[str]],
        limit: int,
    ) -> list[Row]:
        """
        Rows where, for at least one sequence, every fragment occurs in
        ``field`` in the given order (case-insensitive).

        ``[["john smith"], ["john", "smith"]]`` matches "John Smith" and
        "John A. Smith". Ordered by ``field`` then ``id``.
        """
        ...

    async def sample(self, limit: int) -> list[Row]:
        """A bounded, stable set of rows used for similarity suggestions."""
        ...

    async def ranged_fetch(
        self,
        offset: int,
        limit: int,
        order_by: str,
        descending: bool = False,
    ) -> list[Row]:
        """A page of rows ordered by ``order_by`` (nulls last), ties broken by ``id``."""
        ...
