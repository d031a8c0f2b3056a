"""
Shared fixtures for judgefinder unit tests.
"""

import pytest

from src.common.cache import MemoryCache
from src.judgefinder.cache import LookupCache
from src.judgefinder.errors import BackendUnavailableError
from src.judgefinder.store import COURT_COLUMNS, JUDGE_COLUMNS, InMemoryRecordStore


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def judge_row(id, name, slug=None, **extra):
    row = {
        "id": id,
        "name": name,
        "slug": slug,
        "court_name": None,
        "jurisdiction": "CA",
        "total_cases": 0,
        "profile_image_url": None,
    }
    row.update(extra)
    return row


JANE_A_DOE = judge_row(
    "j-1", "Jane A. Doe", "jane-a-doe", total_cases=120, court_name="Superior Court of Orange"
)
JANE_B_DOE = judge_row("j-2", "Jane B. Doe", "jane-b-doe", total_cases=40)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    return MemoryCache(max_size=100, default_ttl=60, clock=clock)


@pytest.fixture
def lookup_cache(memory_cache):
    return LookupCache(memory_cache, timeout_seconds=1.0)


@pytest.fixture
def jane_does():
    return [dict(JANE_A_DOE), dict(JANE_B_DOE)]


@pytest.fixture
def judge_store(jane_does):
    return InMemoryRecordStore(jane_does, fields=JUDGE_COLUMNS)


@pytest.fixture
def court_store():
    return InMemoryRecordStore(
        [
            {"id": "c-1", "name": "Orange County Superior Court", "type": "state",
             "jurisdiction": "CA", "judge_count": 12},
            {"id": "c-2", "name": "US District Court Central District", "type": "federal",
             "jurisdiction": "F", "judge_count": 30},
        ],
        fields=COURT_COLUMNS,
    )


class FailingRecordStore(InMemoryRecordStore):
    """In-memory store whose listed methods raise BackendUnavailableError."""

    def __init__(self, rows=(), fields=None, failing=()):
        super().__init__(rows, fields)
        self.failing = set(failing)

    def _check(self, method):
        if method in self.failing:
            self.calls.append((method, ()))
            raise BackendUnavailableError(method, "connection refused")

    async def find_by_exact_field(self, field, value):
        self._check("find_by_exact_field")
        return await super().find_by_exact_field(field, value)

    async def find_by_substring(self, field, value, limit):
        self._check("find_by_substring")
        return await super().find_by_substring(field, value, limit)

    async def find_by_any_sequence(self, field, sequences, limit):
        self._check("find_by_any_sequence")
        return await super().find_by_any_sequence(field, sequences, limit)

    async def sample(self, limit):
        self._check("sample")
        return await super().sample(limit)

    async def ranged_fetch(self, offset, limit, order_by, descending=False):
        self._check("ranged_fetch")
        return await super().ranged_fetch(offset, limit, order_by, descending)


@pytest.fixture
def failing_store():
    """Factory: ``failing_store(rows, fields, failing=[...])``."""
    return FailingRecordStore


@pytest.fixture
def make_row():
    """Factory for judge rows: ``make_row(id, name, slug=None, **extra)``."""
    return judge_row
