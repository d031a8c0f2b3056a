"""
In-memory record store.

Holds rows in a list and answers the same queries as the PostgreSQL store,
including its ordering rules. Used by unit tests and local runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from src.judgefinder.errors import InternalError
from src.judgefinder.store.protocols import Row


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _contains_in_order(haystack: str, fragments: Sequence[str]) -> bool:
    position = 0
    for fragment in fragments:
        folded = fragment.casefold()
        found = haystack.find(folded, position)
        if found < 0:
            return False
        position = found + len(folded)
    return True


class InMemoryRecordStore:
    """
    In-memory implementation of RecordStore.

    ``calls`` records each query as ``(method, args)`` so tests can assert
    which lookups ran and in what order.
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]] = (), fields: Iterable[str] | None = None):
        self._rows: list[dict[str, Any]] = [dict(row) for row in rows]
        self._fields = frozenset(fields) if fields is not None else None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def add(self, row: Mapping[str, Any]) -> None:
        self._rows.append(dict(row))

    def __len__(self) -> int:
        return len(self._rows)

    def _check_field(self, field: str) -> None:
        if self._fields is not None and field not in self._fields:
            raise InternalError(f"Unknown field '{field}'")

    def _ordered_by(self, rows: Iterable[dict[str, Any]], field: str) -> list[dict[str, Any]]:
        return sorted(rows, key=lambda row: (_text(row.get(field)), _text(row.get("id"))))

    async def find_by_exact_field(self, field: str, value: str) -> list[Row]:
        self.calls.append(("find_by_exact_field", (field, value)))
        self._check_field(field)
        matches = [row for row in self._rows if _text(row.get(field)) == value]
        return self._ordered_by(matches, "id")

    async def find_by_substring(self, field: str, value: str, limit: int) -> list[Row]:
        self.calls.append(("find_by_substring", (field, value, limit)))
        self._check_field(field)
        needle = value.casefold()
        matches = [row for row in self._rows if needle in _text(row.get(field)).casefold()]
        return self._ordered_by(matches, field)[:limit]

    async def find_by_any_sequence(
        self,
        field: str,
        sequences: Sequence[Sequence[str]],
        limit: int,
    ) -> list[Row]:
        self.calls.append(("find_by_any_sequence", (field, tuple(map(tuple, sequences)), limit)))
        self._check_field(field)
        matches = [
            row
            for row in self._rows
            if any(
                _contains_in_order(_text(row.get(field)).casefold(), fragments)
                for fragments in sequences
            )
        ]
        return self._ordered_by(matches, field)[:limit]

    async def sample(self, limit: int) -> list[Row]:
        self.calls.append(("sample", (limit,)))
        return self._ordered_by(self._rows, "id")[:limit]

    async def ranged_fetch(
        self,
        offset: int,
        limit: int,
        order_by: str,
        descending: bool = False,
    ) -> list[Row]:
        self.calls.append(("ranged_fetch", (offset, limit, order_by, descending)))
        self._check_field(order_by)
        present = [row for row in self._rows if row.get(order_by) is not None]
        missing = [row for row in self._rows if row.get(order_by) is None]

        # Two stable passes: id ascending, then the order column
        present.sort(key=lambda row: _text(row.get("id")))
        present.sort(key=lambda row: row[order_by], reverse=descending)
        missing.sort(key=lambda row: _text(row.get("id")))

        return (present + missing)[offset : offset + limit]
