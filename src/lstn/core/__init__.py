"""Core pipeline: verdicts fan-out and analysis context."""

from .analysis import new_context
from .tracker import Dependency, KindStats, PackagesTracker, RetrievalFunc, track_packages

__all__ = [
    "Dependency",
    "KindStats",
    "PackagesTracker",
    "RetrievalFunc",
    "new_context",
    "track_packages",
]
