"""
Learner progress: settings, attempt history, statistics and review sets.
"""

from src.progress.store import ProgressStore, round_half_up
from src.progress.types import (
    ProblemStats,
    ProgressConfig,
    ProgressState,
    ProgressStats,
    ResultEntry,
    ReviewMode,
)

__all__ = [
    "ProgressStore",
    "round_half_up",
    "ProblemStats",
    "ProgressConfig",
    "ProgressState",
    "ProgressStats",
    "ResultEntry",
    "ReviewMode",
]
