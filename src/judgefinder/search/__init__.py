"""
Relevance search across judges, courts and jurisdictions.
"""

from src.judgefinder.search.engine import SearchEngine, SearchSettings
from src.judgefinder.search.relevance import relevance, sort_key

__all__ = ["SearchEngine", "SearchSettings", "relevance", "sort_key"]
