"""
Tests for relevance search, browsing and suggestions.
"""

import asyncio

import pytest

from src.judgefinder.errors import InvalidInputError
from src.judgefinder.models import SearchResultKind
from src.judgefinder.search import SearchEngine, SearchSettings
from src.judgefinder.store import COURT_COLUMNS, JUDGE_COLUMNS, InMemoryRecordStore

JUDGE = SearchResultKind.JUDGE
COURT = SearchResultKind.COURT
JURISDICTION = SearchResultKind.JURISDICTION


@pytest.fixture
def engine(judge_store, court_store, lookup_cache, clock):
    return SearchEngine(judge_store, court_store, cache=lookup_cache, clock=clock)


class SlowStore(InMemoryRecordStore):
    async def find_by_substring(self, field, value, limit):
        await asyncio.sleep(1)
        return await super().find_by_substring(field, value, limit)


class TestSearch:
    async def test_judges_ranked_by_relevance_then_title(self, engine):
        response = await engine.search("doe", entity_types=["judge"])

        assert [r.title for r in response.results] == ["Jane A. Doe", "Jane B. Doe"]
        assert [r.relevance_score for r in response.results] == [60.0, 60.0]
        assert response.total_count == 2
        assert response.counts_by_type == {JUDGE: 2, COURT: 0, JURISDICTION: 0}
        assert response.results_by_type[COURT] == ()

    async def test_judge_result_shape(self, engine):
        response = await engine.search("jane a", entity_types=[JUDGE])

        hit = response.results[0]
        assert hit.kind is JUDGE
        assert hit.id == "j-1"
        assert hit.subtitle == "Superior Court of Orange"
        assert hit.description == "CA jurisdiction • 120 cases"
        assert hit.url == "/judges/jane-a-doe"
        assert hit.relevance_score == 80.0

    async def test_court_defaults(self, judge_store, clock):
        courts = InMemoryRecordStore(
            [{"id": "c-9", "name": "Alpine Court", "type": None, "jurisdiction": None, "judge_count": None}],
            fields=COURT_COLUMNS,
        )
        engine = SearchEngine(judge_store, courts, clock=clock)

        response = await engine.search("alpine", entity_types=["court"])

        hit = response.results[0]
        assert hit.subtitle == "Superior Court"
        assert hit.description == "CA • 0 judges"
        assert hit.url == "/courts/alpine-court"

    async def test_merges_all_types(self, engine):
        response = await engine.search("orange")

        assert [(r.kind, r.title) for r in response.results] == [
            (JURISDICTION, "Orange County"),
            (COURT, "Orange County Superior Court"),
        ]
        assert all(r.relevance_score == 80.0 for r in response.results)

    async def test_multi_word_query_matches_words_in_order(self, engine, judge_store):
        response = await engine.search("jane doe", entity_types=["judge"])

        assert [r.id for r in response.results] == ["j-1", "j-2"]
        assert judge_store.calls[-1] == (
            "find_by_any_sequence",
            ("name", (("jane doe",), ("jane", "doe")), 200),
        )

    async def test_limit_truncates_but_counts_everything(self, engine):
        response = await engine.search("orange", limit=1)

        assert [r.title for r in response.results] == ["Orange County"]
        assert len(response.results_by_type[COURT]) == 1
        assert len(response.results_by_type[JURISDICTION]) == 1
        assert response.total_count == 2

    async def test_query_is_sanitized_but_echoed_raw(self, engine, judge_store):
        response = await engine.search("  <doe>  ", entity_types=["judge"])

        assert response.query == "  <doe>  "
        assert judge_store.calls[-1] == ("find_by_substring", ("name", "doe", 200))

    async def test_unknown_type_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.search("doe", entity_types=["lawyer"])

    async def test_query_too_long_rejected(self, engine):
        with pytest.raises(InvalidInputError):
            await engine.search("x" * 201)


class TestLimits:
    @pytest.mark.parametrize(
        "requested, expected",
        [(None, 200), (0, 1), (-5, 1), (50, 50), (2000, 2000), (5000, 2000)],
    )
    def test_clamp_limit(self, engine, requested, expected):
        assert engine.clamp_limit(requested) == expected

    def test_custom_settings(self, judge_store, court_store):
        engine = SearchEngine(
            judge_store, court_store, settings=SearchSettings(default_limit=10, hard_limit=20)
        )
        assert engine.clamp_limit(None) == 10
        assert engine.clamp_limit(99) == 20


class TestBrowse:
    @pytest.mark.parametrize("query", ["", "   ", None, "%%%"])
    async def test_empty_query_browses(self, engine, judge_store, query):
        response = await engine.search(query, entity_types=["court"])

        assert [r.title for r in response.results] == [
            "Jane A. Doe",
            "Jane B. Doe",
            "California",
            "Federal",
            "Los Angeles County",
        ]
        assert response.counts_by_type == {JUDGE: 2, COURT: 0, JURISDICTION: 3}
        assert response.total_count == 5
        assert judge_store.calls == [("ranged_fetch", (0, 200, "total_cases", True))]

    async def test_browse_survives_judge_failure(self, failing_store, jane_does, court_store, clock):
        judges = failing_store(jane_does, JUDGE_COLUMNS, failing=["ranged_fetch"])
        engine = SearchEngine(judges, court_store, clock=clock)

        response = await engine.search("")

        assert [r.kind for r in response.results] == [JURISDICTION] * 3

    async def test_browse_drops_judges_on_unmappable_row(self, jane_does, court_store, make_row, clock):
        rows = [*jane_does, make_row(None, "Jane Z. Doe", total_cases=500)]
        engine = SearchEngine(InMemoryRecordStore(rows, fields=JUDGE_COLUMNS), court_store, clock=clock)

        response = await engine.search("")

        assert [r.kind for r in response.results] == [JURISDICTION] * 3
        assert response.counts_by_type[JUDGE] == 0

class TestFailureIsolation:
    async def test_failed_type_leaves_others(
        self, failing_store, jane_does, court_store, lookup_cache, memory_cache, clock
    ):
        judges = failing_store(
            jane_does, JUDGE_COLUMNS, failing=["find_by_substring", "find_by_any_sequence"]
        )
        engine = SearchEngine(judges, court_store, cache=lookup_cache, clock=clock)

        response = await engine.search("orange")

        assert response.counts_by_type == {JUDGE: 0, COURT: 1, JURISDICTION: 1}
        # Degraded responses are not cached
        assert len(memory_cache) == 0

    async def test_slow_type_times_out(self, jane_does, court_store, clock):
        judges = SlowStore(jane_does, fields=JUDGE_COLUMNS)
        engine = SearchEngine(
            judges,
            court_store,
            settings=SearchSettings(search_timeout_seconds=0.01),
            clock=clock,
        )

        response = await engine.search("orange")

        assert response.counts_by_type[JUDGE] == 0
        assert response.counts_by_type[COURT] == 1

    async def test_unmappable_row_degrades_only_its_type(
        self, jane_does, court_store, lookup_cache, memory_cache, make_row, clock
    ):
        rows = [*jane_does, make_row(None, "Orange Z. Doe")]
        engine = SearchEngine(
            InMemoryRecordStore(rows, fields=JUDGE_COLUMNS), court_store, cache=lookup_cache, clock=clock
        )

        response = await engine.search("orange")

        assert response.counts_by_type == {JUDGE: 0, COURT: 1, JURISDICTION: 1}
        assert len(memory_cache) == 0


class TestSearchCache:
    async def test_repeat_query_served_from_cache(self, engine, judge_store, court_store):
        first = await engine.search("doe")
        judge_calls, court_calls = len(judge_store.calls), len(court_store.calls)

        second = await engine.search("  DOE ")

        assert second.results == first.results
        assert second.query == "  DOE "
        assert len(judge_store.calls) == judge_calls
        assert len(court_store.calls) == court_calls

    async def test_type_order_does_not_matter(self, engine, judge_store):
        await engine.search("doe", entity_types=["court", "judge"])
        calls = len(judge_store.calls)

        await engine.search("doe", entity_types=["judge", "court"])

        assert len(judge_store.calls) == calls

    async def test_different_limit_is_different_entry(self, engine, judge_store):
        await engine.search("doe", limit=5)
        calls = len(judge_store.calls)

        await engine.search("doe", limit=6)

        assert len(judge_store.calls) == calls + 1

    async def test_caching_disabled_with_zero_ttl(self, judge_store, court_store, lookup_cache, clock):
        engine = SearchEngine(
            judge_store,
            court_store,
            cache=lookup_cache,
            settings=SearchSettings(cache_ttl_seconds=0),
            clock=clock,
        )
        await engine.search("doe")
        await engine.search("doe")

        assert [m for m, _ in judge_store.calls].count("find_by_substring") == 2

    async def test_repeat_query_without_cache_is_stable(self, judge_store, court_store, clock):
        engine = SearchEngine(judge_store, court_store, clock=clock)

        first = await engine.search("orange")
        second = await engine.search("orange")

        assert [r.title for r in first.results] == ["Orange County", "Orange County Superior Court"]
        assert second.results == first.results
        assert second.counts_by_type == first.counts_by_type
        assert [m for m, _ in judge_store.calls].count("find_by_substring") == 2


class TestSuggest:
    async def test_judge_suggestions(self, engine):
        response = await engine.suggest("jane")

        assert [s.to_dict() for s in response.suggestions] == [
            {"text": "Jane A. Doe", "type": "judge", "count": 120, "url": "/judges/jane-a-doe"},
            {"text": "Jane B. Doe", "type": "judge", "count": 40, "url": "/judges/jane-b-doe"},
        ]

    async def test_jurisdictions_then_common_searches(self, engine):
        response = await engine.suggest("cal")

        assert [(s.text, s.kind) for s in response.suggestions] == [
            ("California", JURISDICTION),
            ("California Superior Court", COURT),
        ]
        assert response.suggestions[0].url == "/jurisdictions/california"
        assert response.suggestions[1].url == "/search?q=California+Superior+Court&type=court"

    async def test_limit_applies_to_judge_query_and_output(self, engine, judge_store):
        response = await engine.suggest("jane", limit=1)

        assert len(response.suggestions) == 1
        assert judge_store.calls == [("find_by_substring", ("name", "jane", 1))]

    async def test_judge_query_capped_at_ten(self, engine, judge_store):
        await engine.suggest("jane", limit=50)
        assert judge_store.calls == [("find_by_substring", ("name", "jane", 10))]

    async def test_empty_query(self, engine, judge_store):
        response = await engine.suggest("   ")
        assert response.suggestions == ()
        assert judge_store.calls == []

    async def test_judge_failure_keeps_other_suggestions(
        self, failing_store, jane_does, court_store, clock
    ):
        judges = failing_store(jane_does, JUDGE_COLUMNS, failing=["find_by_substring"])
        engine = SearchEngine(judges, court_store, clock=clock)

        response = await engine.suggest("federal")

        assert [s.text for s in response.suggestions] == ["Federal", "Federal Court"]

    async def test_unmappable_judge_row_keeps_other_suggestions(self, court_store, make_row, clock):
        rows = [make_row("j-1", "Federal Judge One"), make_row(None, "Federal Judge Two")]
        engine = SearchEngine(InMemoryRecordStore(rows, fields=JUDGE_COLUMNS), court_store, clock=clock)

        response = await engine.suggest("federal")

        assert [s.text for s in response.suggestions] == ["Federal", "Federal Court"]
