"""
Judge Resolver

Resolves a URL identifier ("jane-doe") to a judge record by trying
progressively looser strategies:

1. Lookup cache
2. Exact match on the stored slug
3. Substring match on the slug
4. Name search using spellings reconstructed from the identifier
5. Similar identifiers, offered as suggestions when nothing matched

A stage whose backend is down counts as "no match" and the cascade moves on.
Only invalid input raises; "not found" is an ordinary result.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass

from src.common.telemetry import get_tracer
from src.judgefinder.cache import LookupCache
from src.judgefinder.config import JudgeFinderConfig
from src.judgefinder.errors import BackendUnavailableError
from src.judgefinder.models import (
    MAX_MATCH_ALTERNATIVES,
    MAX_SUGGESTIONS,
    FoundBy,
    Judge,
    ResolutionResult,
)
from src.judgefinder.normalizer import derive_identifier, expand_variations
from src.judgefinder.observability import MetricsSink, NullMetricsSink
from src.judgefinder.similarity import similarity
from src.judgefinder.store.protocols import RecordStore, Row
from src.judgefinder.validation import validate_identifier

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

SIMILARITY_THRESHOLD = 0.6
LENGTH_TOLERANCE = 0.3

# (result, ttl seconds); a ttl of 0 means "do not write back to the cache"
StageOutcome = tuple[ResolutionResult, int]
Stage = Callable[[str], Awaitable[StageOutcome | None]]


@dataclass(frozen=True)
class ResolverSettings:
    """Tunables for the lookup cascade."""

    long_ttl_seconds: int = 1800
    medium_ttl_seconds: int = 900
    negative_cache_ttl_seconds: int = 0
    fuzzy_limit: int = 10
    name_variation_limit: int = 5
    suggestion_sample_size: int = 100
    max_identifier_length: int = 200

    @classmethod
    def from_config(cls, config: JudgeFinderConfig) -> ResolverSettings:
        return cls(
            long_ttl_seconds=config.long_ttl_seconds,
            medium_ttl_seconds=config.medium_ttl_seconds,
            negative_cache_ttl_seconds=config.negative_cache_ttl_seconds,
            fuzzy_limit=config.fuzzy_limit,
            name_variation_limit=config.name_variation_limit,
            suggestion_sample_size=config.suggestion_sample_size,
            max_identifier_length=config.max_identifier_length,
        )


def rank_similar(identifier: str, candidates: Iterable[Judge], limit: int = MAX_SUGGESTIONS) -> list[Judge]:
    """
    Judges whose identifier looks like ``identifier``, most similar first.

    Candidates whose identifier length is off by more than 30% are skipped
    without scoring; the rest need a similarity above 0.6. Ties keep the
    candidates' input order.
    """
    max_length_gap = math.floor(len(identifier) * LENGTH_TOLERANCE)
    scored: list[tuple[float, Judge]] = []
    for judge in candidates:
        candidate_id = judge.identifier
        if abs(len(candidate_id) - len(identifier)) > max_length_gap:
            continue
        score = similarity(identifier, candidate_id)
        if score > SIMILARITY_THRESHOLD:
            scored.append((score, judge))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [judge for _, judge in scored[:limit]]


def _judges(rows: Iterable[Row]) -> list[Judge]:
    return [Judge.from_row(row) for row in rows]


class JudgeResolver:
    """
    Resolves identifiers to judges through the lookup cascade.

    Stateless apart from its collaborators; safe to share across requests.
    """

    def __init__(
        self,
        judges: RecordStore,
        cache: LookupCache | None = None,
        metrics: MetricsSink | None = None,
        settings: ResolverSettings | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize the resolver.

        Args:
            judges: Record store over the judges table
            cache: Lookup cache; None disables caching
            metrics: Sink for per-stage timings
            settings: Cascade tunables
            clock: Seconds clock used for timings
        """
        self._judges = judges
        self._cache = cache
        self._metrics = metrics or NullMetricsSink()
        self._settings = settings or ResolverSettings()
        self._clock = clock
        self._stages: list[tuple[str, Stage]] = [
            ("cache", self._from_cache),
            ("exact_identifier", self._exact_identifier),
            ("fuzzy_identifier", self._fuzzy_identifier),
            ("name_fallback", self._name_fallback),
            ("suggestions", self._suggestions),
        ]

    @property
    def stage_names(self) -> list[str]:
        return [name for name, _ in self._stages]

    async def resolve(self, identifier: str) -> ResolutionResult:
        """
        Resolve an identifier to a judge.

        Raises:
            InvalidInputError: Malformed identifier (no lookup is attempted).
            RecordMappingError: A stored row is missing required fields.
        """
        validate_identifier(identifier, self._settings.max_identifier_length)

        with tracer.start_as_current_span("judge.resolve") as span:
            span.set_attribute("judge.identifier", identifier)

            for name, stage in self._stages:
                outcome = await self._run_stage(name, stage, identifier)
                if outcome is None:
                    continue

                result, ttl = outcome
                if ttl > 0 and self._cache is not None:
                    await self._cache.put_resolution(identifier, result, ttl)

                span.set_attribute("judge.stage", name)
                span.set_attribute("judge.found_by", result.found_by.value)
                logger.debug(f"Resolved '{identifier}' at stage {name}: {result.found_by.value}")
                return result

            # Only reached when the suggestion stage itself failed
            span.set_attribute("judge.stage", "none")
            span.set_attribute("judge.found_by", FoundBy.NOT_FOUND.value)
            return ResolutionResult.not_found()

    async def _run_stage(self, name: str, stage: Stage, identifier: str) -> StageOutcome | None:
        started = self._clock()
        status = "miss"
        try:
            outcome = await stage(identifier)
            if outcome is not None:
                status = "hit"
            return outcome
        except (BackendUnavailableError, TimeoutError) as e:
            status = "error"
            logger.warning(f"Lookup stage {name} failed for '{identifier}': {e}")
            return None
        finally:
            await self._record(name, started, {"identifier": identifier, "status": status})

    async def _record(self, event: str, started: float, tags: Mapping[str, str]) -> None:
        duration_ms = (self._clock() - started) * 1000
        try:
            await self._metrics.record(f"judge_lookup.{event}", duration_ms, tags)
        except Exception as e:
            logger.debug(f"Metrics sink failed for {event}: {e}")

    # === Stages ===

    async def _from_cache(self, identifier: str) -> StageOutcome | None:
        if self._cache is None:
            return None
        cached = await self._cache.get_resolution(identifier)
        if cached is None:
            return None
        return cached, 0

    async def _exact_identifier(self, identifier: str) -> StageOutcome | None:
        rows = await self._judges.find_by_exact_field("slug", identifier)
        if not rows:
            return None
        judge = Judge.from_row(rows[0])
        return (
            ResolutionResult(judge=judge, found_by=FoundBy.EXACT_IDENTIFIER),
            self._settings.long_ttl_seconds,
        )

    async def _fuzzy_identifier(self, identifier: str) -> StageOutcome | None:
        # "jane-doe" should also find "jane-a-doe": whole identifier, or its parts in order
        sequences = [[identifier]]
        parts = identifier.split("-")
        if len(parts) > 1:
            sequences.append(parts)
        candidates = _judges(
            await self._judges.find_by_any_sequence("slug", sequences, self._settings.fuzzy_limit)
        )
        if not candidates:
            return None

        for judge in candidates:
            if judge.identifier == identifier:
                return (
                    ResolutionResult(judge=judge, found_by=FoundBy.EXACT_NAME),
                    self._settings.long_ttl_seconds,
                )

        best, *rest = candidates
        return (
            ResolutionResult(
                judge=best,
                found_by=FoundBy.PARTIAL_NAME,
                alternatives=tuple(rest[:MAX_MATCH_ALTERNATIVES]),
            ),
            self._settings.medium_ttl_seconds,
        )

    async def _name_fallback(self, identifier: str) -> StageOutcome | None:
        for variation in expand_variations(identifier):
            candidates = _judges(
                await self._judges.find_by_substring(
                    "name", variation, self._settings.name_variation_limit
                )
            )
            if not candidates:
                continue

            best = next(
                (j for j in candidates if derive_identifier(j.name) == identifier),
                candidates[0],
            )
            alternatives = tuple(j for j in candidates if j.id != best.id)[:MAX_MATCH_ALTERNATIVES]
            logger.debug(f"Name variation '{variation}' matched {len(candidates)} judges")
            return (
                ResolutionResult(judge=best, found_by=FoundBy.EXACT_NAME, alternatives=alternatives),
                self._settings.long_ttl_seconds,
            )
        return None

    async def _suggestions(self, identifier: str) -> StageOutcome | None:
        sample = _judges(await self._judges.sample(self._settings.suggestion_sample_size))
        suggestions = rank_similar(identifier, sample)
        return (
            ResolutionResult.not_found(tuple(suggestions)),
            self._settings.negative_cache_ttl_seconds,
        )
