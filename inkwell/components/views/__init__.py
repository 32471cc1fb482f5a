"""
Views component - Per-article view counting.
"""

from ._impl import InMemoryViewCounterRepo, RecentViewGuard
from .component import ViewCounter, run_increment
from .models import IncrementViewInput, IncrementViewOutput
from .ports import TimePort, ViewCounterRepoPort

__all__ = [
    # Entry points
    "ViewCounter",
    "run_increment",
    # Models
    "IncrementViewInput",
    "IncrementViewOutput",
    # Adapters
    "InMemoryViewCounterRepo",
    "RecentViewGuard",
    # Ports
    "TimePort",
    "ViewCounterRepoPort",
]
