"""
Data models for the roll search application.
"""

from .precinct import PrecinctId, SCOPE_SEPARATOR
from .voter import VoterRecord, REQUIRED_FIELDS
from .state import SearchMode, FilterSelection, ViewState

__all__ = [
    # Precinct models
    "PrecinctId",
    "SCOPE_SEPARATOR",

    # Voter models
    "VoterRecord",
    "REQUIRED_FIELDS",

    # View state
    "SearchMode",
    "FilterSelection",
    "ViewState",
]
