"""JudgeFinder - judge directory lookup and relevance search."""

__version__ = "0.1.0"
