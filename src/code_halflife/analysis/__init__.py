"""Analysis modules for code half-life estimation.

This package provides core analysis functionality including:
- Line identity resolution
- Line lifecycle tracking across commits
- Survival statistics and half-life estimation
"""

from code_halflife.analysis.identity import ContentIdentityResolver, LineIdentityResolver
from code_halflife.analysis.survival_stats import AggregateStats, calculate_survival_stats
from code_halflife.analysis.tracking import LifecycleTracker, LineRecord, ReplayState

__all__ = [
    "AggregateStats",
    "ContentIdentityResolver",
    "LifecycleTracker",
    "LineIdentityResolver",
    "LineRecord",
    "ReplayState",
    "calculate_survival_stats",
]
