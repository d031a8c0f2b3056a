"""
Judge resolution: identifier -> judge lookup cascade.
"""

from src.judgefinder.resolution.resolver import JudgeResolver, ResolverSettings, rank_similar

__all__ = ["JudgeResolver", "ResolverSettings", "rank_similar"]
