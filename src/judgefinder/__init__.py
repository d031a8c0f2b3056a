"""
JudgeFinder lookup and search.

Resolves profile identifiers ("jane-a-doe") to judges through a cascade of
progressively looser matches, and ranks free-text search results across
judges, courts and jurisdictions.

Usage:
    from src.judgefinder import JudgeFinderConfig, build_services

    services = await build_services(JudgeFinderConfig())
    result = await services.resolver.resolve("jane-a-doe")
    response = await services.search.search("doe", limit=10)
"""

from src.judgefinder.config import JudgeFinderConfig, load_config
from src.judgefinder.errors import (
    BackendUnavailableError,
    InternalError,
    InvalidInputError,
    JudgeFinderError,
    RecordMappingError,
)
from src.judgefinder.factory import JudgeFinderServices, build_engines, build_services
from src.judgefinder.models import (
    Court,
    FoundBy,
    Judge,
    Jurisdiction,
    ResolutionResult,
    SearchResponse,
    SearchResult,
    SearchResultKind,
    SearchSuggestion,
    SuggestionsResponse,
)
from src.judgefinder.resolution import JudgeResolver
from src.judgefinder.search import SearchEngine

__all__ = [
    # Config
    "JudgeFinderConfig",
    "load_config",
    # Errors
    "JudgeFinderError",
    "InvalidInputError",
    "BackendUnavailableError",
    "RecordMappingError",
    "InternalError",
    # Models
    "Judge",
    "Court",
    "Jurisdiction",
    "FoundBy",
    "ResolutionResult",
    "SearchResult",
    "SearchResultKind",
    "SearchResponse",
    "SearchSuggestion",
    "SuggestionsResponse",
    # Engines
    "JudgeResolver",
    "SearchEngine",
    "JudgeFinderServices",
    "build_engines",
    "build_services",
]
