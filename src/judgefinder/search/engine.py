"""
Relevance Search Engine

Answers free-text queries across judges, courts and jurisdictions. Each
requested type is searched concurrently and independently: one type timing
out or failing leaves the others intact. Hits are scored, merged into a
single total order and truncated to the requested limit.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from urllib.parse import urlencode

from src.common.resilience import with_timeout
from src.common.telemetry import get_tracer
from src.judgefinder import jurisdictions as catalogue
from src.judgefinder.cache import LookupCache, search_key
from src.judgefinder.config import JudgeFinderConfig
from src.judgefinder.errors import BackendUnavailableError, InvalidInputError
from src.judgefinder.models import (
    Court,
    Judge,
    Jurisdiction,
    SearchResponse,
    SearchResult,
    SearchResultKind,
    SearchSuggestion,
    SuggestionsResponse,
)
from src.judgefinder.search.relevance import relevance, sort_key
from src.judgefinder.store.protocols import RecordStore
from src.judgefinder.validation import sanitize_query

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

ALL_KINDS: tuple[SearchResultKind, ...] = tuple(SearchResultKind)

DEFAULT_JURISDICTION = "CA"
DEFAULT_COURT_TYPE = "Superior"
MAX_JUDGE_SUGGESTIONS = 10
MAX_JURISDICTION_SUGGESTIONS = 3

COMMON_SEARCHES: tuple[tuple[str, SearchResultKind, int], ...] = (
    ("California Superior Court", SearchResultKind.COURT, 150),
    ("Federal Court", SearchResultKind.COURT, 89),
    ("Criminal Defense", SearchResultKind.JUDGE, 234),
    ("Civil Litigation", SearchResultKind.JUDGE, 189),
)


@dataclass(frozen=True)
class SearchSettings:
    """Tunables for relevance search."""

    default_limit: int = 200
    hard_limit: int = 2000
    max_query_length: int = 200
    search_timeout_seconds: float = 10.0
    cache_ttl_seconds: int = 300

    @classmethod
    def from_config(cls, config: JudgeFinderConfig) -> SearchSettings:
        return cls(
            default_limit=config.search_default_limit,
            hard_limit=config.search_hard_limit,
            max_query_length=config.max_query_length,
            search_timeout_seconds=config.search_timeout_seconds,
            cache_ttl_seconds=config.search_cache_ttl_seconds,
        )


# === Result builders ===


def judge_result(judge: Judge, query: str) -> SearchResult:
    jurisdiction = judge.jurisdiction or DEFAULT_JURISDICTION
    return SearchResult(
        kind=SearchResultKind.JUDGE,
        id=judge.id,
        title=judge.name,
        subtitle=judge.court_name or "Court information pending",
        description=f"{jurisdiction} jurisdiction • {judge.total_cases} cases",
        url=f"/judges/{judge.identifier}",
        relevance_score=relevance(query, judge.name) if query else 0.0,
        attributes={
            "court_name": judge.court_name,
            "jurisdiction": jurisdiction,
            "total_cases": judge.total_cases,
            "profile_image_url": judge.profile_image_url,
        },
    )


def court_result(court: Court, query: str) -> SearchResult:
    court_type = court.court_type or DEFAULT_COURT_TYPE
    jurisdiction = court.jurisdiction or DEFAULT_JURISDICTION
    return SearchResult(
        kind=SearchResultKind.COURT,
        id=court.id,
        title=court.name,
        subtitle=f"{court_type} Court",
        description=f"{jurisdiction} • {court.judge_count} judges",
        url=f"/courts/{court.identifier}",
        relevance_score=relevance(query, court.name),
        attributes={
            "court_type": court_type,
            "jurisdiction": jurisdiction,
            "judge_count": court.judge_count,
        },
    )


def jurisdiction_result(jurisdiction: Jurisdiction, query: str) -> SearchResult:
    return SearchResult(
        kind=SearchResultKind.JURISDICTION,
        id=jurisdiction.id,
        title=jurisdiction.title,
        subtitle=jurisdiction.subtitle,
        description=jurisdiction.description,
        url=jurisdiction.url,
        relevance_score=relevance(query, jurisdiction.title) if query else 0.0,
        attributes={
            "jurisdiction_value": jurisdiction.jurisdiction_value,
            "display_name": jurisdiction.display_name,
        },
    )


def _log_degraded(what: str, error: BaseException) -> None:
    if isinstance(error, (BackendUnavailableError, TimeoutError)):
        logger.warning(f"{what} failed: {error}")
    else:
        logger.error(f"{what} raised unexpectedly: {error!r}")


def _parse_kinds(entity_types: Iterable[SearchResultKind | str] | None) -> tuple[SearchResultKind, ...]:
    if entity_types is None:
        return ALL_KINDS
    try:
        requested = {SearchResultKind(t) for t in entity_types}
    except ValueError as e:
        raise InvalidInputError(str(e), field="types") from e
    if not requested:
        return ALL_KINDS
    return tuple(kind for kind in ALL_KINDS if kind in requested)


class SearchEngine:
    """Relevance search over judges, courts and the jurisdiction catalogue."""

    def __init__(
        self,
        judges: RecordStore,
        courts: RecordStore,
        cache: LookupCache | None = None,
        settings: SearchSettings | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._judges = judges
        self._courts = courts
        self._cache = cache
        self._settings = settings or SearchSettings()
        self._clock = clock
        self._searchers: dict[SearchResultKind, Callable[[str, int], Awaitable[list[SearchResult]]]] = {
            SearchResultKind.JUDGE: self._search_judges,
            SearchResultKind.COURT: self._search_courts,
            SearchResultKind.JURISDICTION: self._search_jurisdictions,
        }

    def clamp_limit(self, limit: int | None) -> int:
        """Requested limit forced into [1, hard_limit]; None means the default."""
        if limit is None:
            limit = self._settings.default_limit
        return max(1, min(int(limit), self._settings.hard_limit))

    def _elapsed_ms(self, started: float) -> float:
        return round((self._clock() - started) * 1000, 3)

    async def search(
        self,
        query: str | None,
        limit: int | None = None,
        entity_types: Iterable[SearchResultKind | str] | None = None,
    ) -> SearchResponse:
        """
        Search across entity types.

        An empty query (after sanitising) browses instead: the busiest judges
        plus the pinned jurisdictions, whatever ``entity_types`` says.

        Raises:
            InvalidInputError: Query too long or unknown entity type.
        """
        started = self._clock()
        cleaned = sanitize_query(query, self._settings.max_query_length)
        kinds = _parse_kinds(entity_types)
        limit = self.clamp_limit(limit)

        with tracer.start_as_current_span("judge.search") as span:
            span.set_attribute("search.limit", limit)
            span.set_attribute("search.types", ",".join(k.value for k in kinds))

            if not cleaned:
                span.set_attribute("search.mode", "browse")
                return await self._browse(query or "", limit, started)

            span.set_attribute("search.mode", "query")
            key = search_key(cleaned, limit, kinds)
            if self._cache is not None and self._settings.cache_ttl_seconds > 0:
                cached = await self._cache.get_search(key)
                if cached is not None:
                    span.set_attribute("search.cache_hit", True)
                    return replace(cached, query=query or "", took_ms=self._elapsed_ms(started))

            per_kind, degraded = await self._fan_out(cleaned, limit, kinds)

            merged = sorted(
                (hit for hits in per_kind.values() for hit in hits),
                key=sort_key(cleaned),
            )
            by_kind = {kind: tuple(h for h in merged if h.kind is kind) for kind in ALL_KINDS}
            response = SearchResponse(
                results=tuple(merged[:limit]),
                results_by_type={kind: hits[:limit] for kind, hits in by_kind.items()},
                counts_by_type={kind: len(hits) for kind, hits in by_kind.items()},
                total_count=len(merged),
                query=query or "",
                took_ms=self._elapsed_ms(started),
            )
            span.set_attribute("search.total_count", response.total_count)
            logger.info(
                f"Search '{cleaned}' returned {response.total_count} results "
                f"in {response.took_ms:.1f}ms"
            )

            # Partial answers would otherwise stick around for a full TTL
            if self._cache is not None and self._settings.cache_ttl_seconds > 0 and not degraded:
                await self._cache.put_search(key, response, self._settings.cache_ttl_seconds)
            return response

    async def _fan_out(
        self,
        query: str,
        limit: int,
        kinds: tuple[SearchResultKind, ...],
    ) -> tuple[dict[SearchResultKind, list[SearchResult]], bool]:
        """Run one search per kind concurrently. Returns hits per kind and whether any failed."""
        tasks = [
            with_timeout(self._searchers[kind](query, limit), self._settings.search_timeout_seconds)
            for kind in kinds
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        per_kind: dict[SearchResultKind, list[SearchResult]] = {}
        degraded = False
        for kind, outcome in zip(kinds, outcomes):
            if isinstance(outcome, Exception):
                _log_degraded(f"{kind.value} search for '{query}'", outcome)
                per_kind[kind] = []
                degraded = True
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                per_kind[kind] = outcome
        return per_kind, degraded

    async def _browse(self, raw_query: str, limit: int, started: float) -> SearchResponse:
        try:
            rows = await with_timeout(
                self._judges.ranged_fetch(0, limit, "total_cases", descending=True),
                self._settings.search_timeout_seconds,
            )
            judges = [judge_result(Judge.from_row(row), "") for row in rows]
        except Exception as e:
            _log_degraded("Browse judge fetch", e)
            judges = []

        pinned = [jurisdiction_result(j, "") for j in catalogue.pinned()]
        results = tuple(judges + pinned)
        return SearchResponse(
            results=results,
            results_by_type={
                SearchResultKind.JUDGE: tuple(judges),
                SearchResultKind.COURT: (),
                SearchResultKind.JURISDICTION: tuple(pinned),
            },
            counts_by_type={
                SearchResultKind.JUDGE: len(judges),
                SearchResultKind.COURT: 0,
                SearchResultKind.JURISDICTION: len(pinned),
            },
            total_count=len(results),
            query=raw_query,
            took_ms=self._elapsed_ms(started),
        )

    # === Per-type searches ===

    async def _search_judges(self, query: str, limit: int) -> list[SearchResult]:
        words = query.split()
        if len(words) == 1:
            rows = await self._judges.find_by_substring("name", query, limit)
        else:
            # Full phrase, or the words in order with anything between them
            rows = await self._judges.find_by_any_sequence("name", [[query], words], limit)
        return [judge_result(Judge.from_row(row), query) for row in rows]

    async def _search_courts(self, query: str, limit: int) -> list[SearchResult]:
        rows = await self._courts.find_by_substring("name", query, limit)
        return [court_result(Court.from_row(row), query) for row in rows]

    async def _search_jurisdictions(self, query: str, limit: int) -> list[SearchResult]:
        return [jurisdiction_result(j, query) for j in catalogue.matching(query)[:limit]]

    # === Suggestions ===

    async def suggest(self, query: str | None, limit: int | None = None) -> SuggestionsResponse:
        """
        Typeahead suggestions: judge names, jurisdictions, then common searches.

        Raises:
            InvalidInputError: Query too long.
        """
        cleaned = sanitize_query(query, self._settings.max_query_length)
        limit = self.clamp_limit(limit)
        if not cleaned:
            return SuggestionsResponse(suggestions=(), query=query or "")

        suggestions: list[SearchSuggestion] = []
        try:
            rows = await with_timeout(
                self._judges.find_by_substring(
                    "name", cleaned, min(limit, MAX_JUDGE_SUGGESTIONS)
                ),
                self._settings.search_timeout_seconds,
            )
            judges = [Judge.from_row(row) for row in rows]
            suggestions.extend(
                SearchSuggestion(
                    text=judge.name,
                    kind=SearchResultKind.JUDGE,
                    count=judge.total_cases,
                    url=f"/judges/{judge.identifier}",
                )
                for judge in judges
            )
        except Exception as e:
            _log_degraded(f"Judge suggestions for '{cleaned}'", e)

        folded = cleaned.casefold()
        matching_jurisdictions = [j for j in catalogue.JURISDICTIONS if folded in j.title.casefold()]
        suggestions.extend(
            SearchSuggestion(text=j.title, kind=SearchResultKind.JURISDICTION, count=1, url=j.url)
            for j in matching_jurisdictions[:MAX_JURISDICTION_SUGGESTIONS]
        )
        suggestions.extend(
            SearchSuggestion(
                text=text,
                kind=kind,
                count=count,
                url=f"/search?{urlencode({'q': text, 'type': kind.value})}",
            )
            for text, kind, count in COMMON_SEARCHES
            if folded in text.casefold()
        )

        return SuggestionsResponse(suggestions=tuple(suggestions[:limit]), query=query or "")
