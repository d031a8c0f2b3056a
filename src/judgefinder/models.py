"""
Judge lookup models.

Entities read from the record store, the outcome of an identifier lookup, and
the shapes returned by relevance search. Everything here is immutable and
round-trips through plain dicts so it can sit in the cache.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.judgefinder.errors import InternalError, RecordMappingError
from src.judgefinder.normalizer import derive_identifier, slugify

MAX_MATCH_ALTERNATIVES = 3
MAX_SUGGESTIONS = 5


def _required(row: Mapping[str, Any], entity: str, key: str) -> Any:
    value = row.get(key)
    if value is None or value == "":
        raise RecordMappingError(entity, key)
    return value


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Judge:
    """A judge as stored in the directory."""

    id: str
    name: str
    slug: str | None = None
    court_name: str | None = None
    jurisdiction: str | None = None
    total_cases: int = 0
    profile_image_url: str | None = None

    @property
    def identifier(self) -> str:
        """Stored slug, or the one derived from the name when none is stored."""
        return self.slug or derive_identifier(self.name)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Judge:
        """
        Map a storage row to a Judge.

        Raises:
            RecordMappingError: ``id`` or ``name`` is missing.
        """
        return cls(
            id=str(_required(row, "judge", "id")),
            name=str(_required(row, "judge", "name")),
            slug=_optional_str(row.get("slug")),
            court_name=_optional_str(row.get("court_name")),
            jurisdiction=_optional_str(row.get("jurisdiction")),
            total_cases=int(row.get("total_cases") or 0),
            profile_image_url=_optional_str(row.get("profile_image_url")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "court_name": self.court_name,
            "jurisdiction": self.jurisdiction,
            "total_cases": self.total_cases,
            "profile_image_url": self.profile_image_url,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Judge:
        return cls.from_row(data)


@dataclass(frozen=True)
class Court:
    """A court as stored in the directory."""

    id: str
    name: str
    court_type: str | None = None
    jurisdiction: str | None = None
    judge_count: int = 0
    slug: str | None = None

    @property
    def identifier(self) -> str:
        return self.slug or slugify(self.name)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Court:
        """
        Map a storage row to a Court.

        Raises:
            RecordMappingError: ``id`` or ``name`` is missing.
        """
        return cls(
            id=str(_required(row, "court", "id")),
            name=str(_required(row, "court", "name")),
            court_type=_optional_str(row.get("type", row.get("court_type"))),
            jurisdiction=_optional_str(row.get("jurisdiction")),
            judge_count=int(row.get("judge_count") or 0),
            slug=_optional_str(row.get("slug")),
        )


@dataclass(frozen=True)
class Jurisdiction:
    """A jurisdiction from the static catalogue."""

    id: str
    title: str
    subtitle: str
    description: str
    url: str
    jurisdiction_value: str
    display_name: str


class FoundBy(str, Enum):
    """Which lookup stage produced a resolution result."""

    EXACT_IDENTIFIER = "exact_identifier"
    EXACT_NAME = "exact_name"
    PARTIAL_NAME = "partial_name"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of resolving an identifier.

    Either ``judge`` is set, or ``found_by`` is NOT_FOUND and ``alternatives``
    holds similar-looking judges the caller may have meant.
    """

    judge: Judge | None
    found_by: FoundBy
    alternatives: tuple[Judge, ...] = ()

    def __post_init__(self) -> None:
        if (self.judge is None) != (self.found_by is FoundBy.NOT_FOUND):
            raise InternalError(
                f"judge must be absent exactly when not found (found_by={self.found_by.value})"
            )
        if self.found_by is FoundBy.EXACT_IDENTIFIER and self.alternatives:
            raise InternalError("exact identifier matches carry no alternatives")
        limit = MAX_SUGGESTIONS if self.judge is None else MAX_MATCH_ALTERNATIVES
        if len(self.alternatives) > limit:
            raise InternalError(
                f"{len(self.alternatives)} alternatives exceeds the limit of {limit}"
            )

    @classmethod
    def not_found(cls, suggestions: tuple[Judge, ...] = ()) -> ResolutionResult:
        return cls(judge=None, found_by=FoundBy.NOT_FOUND, alternatives=suggestions)

    @property
    def found(self) -> bool:
        return self.judge is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "judge": self.judge.to_dict() if self.judge else None,
            "found_by": self.found_by.value,
            "alternatives": [alt.to_dict() for alt in self.alternatives],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResolutionResult:
        """Create from dictionary."""
        judge_data = data.get("judge")
        return cls(
            judge=Judge.from_dict(judge_data) if judge_data else None,
            found_by=FoundBy(data["found_by"]),
            alternatives=tuple(Judge.from_dict(alt) for alt in data.get("alternatives", [])),
        )


class SearchResultKind(str, Enum):
    """Entity types covered by relevance search."""

    JUDGE = "judge"
    COURT = "court"
    JURISDICTION = "jurisdiction"


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit. ``attributes`` holds kind-specific fields."""

    kind: SearchResultKind
    id: str
    title: str
    subtitle: str
    description: str
    url: str
    relevance_score: float
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "url": self.url,
            "relevance_score": self.relevance_score,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchResult:
        return cls(
            kind=SearchResultKind(data["type"]),
            id=data["id"],
            title=data["title"],
            subtitle=data["subtitle"],
            description=data["description"],
            url=data["url"],
            relevance_score=float(data["relevance_score"]),
            attributes=dict(data.get("attributes", {})),
        )


@dataclass(frozen=True)
class SearchResponse:
    """
    Relevance search response.

    ``results`` is the merged ranking truncated to the requested limit;
    ``results_by_type`` slices are each capped at the same limit while
    ``counts_by_type`` and ``total_count`` are taken before any truncation.
    Browse responses (empty query) append the pinned jurisdictions after
    the judge page instead.
    """

    results: tuple[SearchResult, ...]
    results_by_type: dict[SearchResultKind, tuple[SearchResult, ...]]
    counts_by_type: dict[SearchResultKind, int]
    total_count: int
    query: str
    took_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "results_by_type": {
                kind.value: [r.to_dict() for r in hits]
                for kind, hits in self.results_by_type.items()
            },
            "counts_by_type": {kind.value: n for kind, n in self.counts_by_type.items()},
            "total_count": self.total_count,
            "query": self.query,
            "took_ms": self.took_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchResponse:
        return cls(
            results=tuple(SearchResult.from_dict(r) for r in data["results"]),
            results_by_type={
                SearchResultKind(kind): tuple(SearchResult.from_dict(r) for r in hits)
                for kind, hits in data["results_by_type"].items()
            },
            counts_by_type={
                SearchResultKind(kind): int(n) for kind, n in data["counts_by_type"].items()
            },
            total_count=int(data["total_count"]),
            query=data["query"],
            took_ms=float(data.get("took_ms", 0.0)),
        )


@dataclass(frozen=True)
class SearchSuggestion:
    """A typeahead suggestion."""

    text: str
    kind: SearchResultKind
    count: int
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "type": self.kind.value, "count": self.count, "url": self.url}


@dataclass(frozen=True)
class SuggestionsResponse:
    suggestions: tuple[SearchSuggestion, ...]
    query: str

    def to_dict(self) -> dict[str, Any]:
        return {"suggestions": [s.to_dict() for s in self.suggestions], "query": self.query}
