"""
Record store adapters.

- RecordStore: protocol the engines depend on
- PostgresRecordStore: asyncpg-backed, one table per instance
- InMemoryRecordStore: list-backed, for tests and local runs
- ResilientRecordStore: timeout / retry / circuit breaker wrapper
"""

from src.judgefinder.store.memory import InMemoryRecordStore
from src.judgefinder.store.postgres import (
    PostgresRecordStore,
    check_db_health,
    create_db_pool,
)
from src.judgefinder.store.protocols import COURT_COLUMNS, JUDGE_COLUMNS, RecordStore, Row
from src.judgefinder.store.resilient import ResilientRecordStore

__all__ = [
    "RecordStore",
    "Row",
    "JUDGE_COLUMNS",
    "COURT_COLUMNS",
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "ResilientRecordStore",
    "create_db_pool",
    "check_db_health",
]
