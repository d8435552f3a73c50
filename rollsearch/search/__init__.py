"""
Fuzzy and exact search over a loaded precinct.
"""

from .fuzzy import FuzzyIndex, FuzzyMatch
from .snapshot import ScopeSnapshot, load_snapshot
from .executor import SearchExecutor, SearchOutcome

__all__ = [
    "FuzzyIndex",
    "FuzzyMatch",
    "ScopeSnapshot",
    "load_snapshot",
    "SearchExecutor",
    "SearchOutcome",
]
