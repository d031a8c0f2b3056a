"""
PostgreSQL record store.

Queries one directory table through an asyncpg pool. Column names can't be
bound as parameters, so every field is checked against the table's column
list before it is interpolated into SQL.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import asyncpg

from src.judgefinder.errors import BackendUnavailableError, InternalError
from src.judgefinder.store.protocols import COURT_COLUMNS, JUDGE_COLUMNS, Row

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, TimeoutError)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards (backslash is PostgreSQL's default escape)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def sequence_pattern(fragments: Sequence[str]) -> str:
    """``["john", "smith"]`` -> ``%john%smith%``."""
    return "%" + "%".join(escape_like(fragment) for fragment in fragments) + "%"


async def create_db_pool(
    postgres_url: str,
    min_size: int = 2,
    max_size: int = 10,
    command_timeout: float = 60.0,
) -> asyncpg.Pool:
    """
    Create a PostgreSQL connection pool.

    Raises:
        BackendUnavailableError: The database could not be reached.
    """
    logger.info(f"Creating database pool (min={min_size}, max={max_size})")
    try:
        pool = await asyncpg.create_pool(
            postgres_url,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
        )
    except _TRANSPORT_ERRORS as e:
        raise BackendUnavailableError("create_pool", str(e)) from e
    logger.info("Database pool created")
    return pool


async def check_db_health(pool: asyncpg.Pool) -> dict:
    """
    Check database health.

    Returns:
        Health status dict
    """
    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return {"connected": True, "pool_size": pool.get_size()}
    except _TRANSPORT_ERRORS as e:
        logger.error(f"Database health check failed: {e}")
        return {"connected": False, "error": str(e)}


class PostgresRecordStore:
    """PostgreSQL implementation of RecordStore for a single table."""

    def __init__(self, pool: asyncpg.Pool, table: str, columns: Iterable[str]):
        self.pool = pool
        self._table = table
        self._columns = tuple(columns)
        self._select = f"SELECT {', '.join(self._columns)} FROM {table}"

    @classmethod
    def judges(cls, pool: asyncpg.Pool) -> PostgresRecordStore:
        return cls(pool, "judges", JUDGE_COLUMNS)

    @classmethod
    def courts(cls, pool: asyncpg.Pool) -> PostgresRecordStore:
        return cls(pool, "courts", COURT_COLUMNS)

    def _column(self, field: str) -> str:
        if field not in self._columns:
            raise InternalError(f"Unknown column '{field}' for table {self._table}")
        return field

    async def _fetch(self, operation: str, query: str, *args: Any) -> list[Row]:
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        except _TRANSPORT_ERRORS as e:
            logger.warning(f"{self._table}.{operation} failed: {e}")
            raise BackendUnavailableError(f"{self._table}.{operation}", str(e)) from e
        return [dict(row) for row in rows]

    async def find_by_exact_field(self, field: str, value: str) -> list[Row]:
        column = self._column(field)
        return await self._fetch(
            "find_by_exact_field",
            f"{self._select} WHERE {column} = $1 ORDER BY id",
            value,
        )

    async def find_by_substring(self, field: str, value: str, limit: int) -> list[Row]:
        column = self._column(field)
        return await self._fetch(
            "find_by_substring",
            f"{self._select} WHERE {column} ILIKE $1 ORDER BY {column}, id LIMIT $2",
            sequence_pattern([value]),
            limit,
        )

    async def find_by_any_sequence(
        self,
        field: str,
        sequences: Sequence[Sequence[str]],
        limit: int,
    ) -> list[Row]:
        column = self._column(field)
        patterns = [sequence_pattern(fragments) for fragments in sequences if fragments]
        if not patterns:
            return []
        return await self._fetch(
            "find_by_any_sequence",
            f"{self._select} WHERE {column} ILIKE ANY($1::text[]) "
            f"ORDER BY {column}, id LIMIT $2",
            patterns,
            limit,
        )

    async def sample(self, limit: int) -> list[Row]:
        return await self._fetch("sample", f"{self._select} ORDER BY id LIMIT $1", limit)

    async def ranged_fetch(
        self,
        offset: int,
        limit: int,
        order_by: str,
        descending: bool = False,
    ) -> list[Row]:
        column = self._column(order_by)
        direction = "DESC" if descending else "ASC"
        return await self._fetch(
            "ranged_fetch",
            f"{self._select} ORDER BY {column} {direction} NULLS LAST, id "
            f"LIMIT $1 OFFSET $2",
            limit,
            offset,
        )
