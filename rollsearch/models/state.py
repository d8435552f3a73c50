"""
View state models.

The whole view is one frozen ViewState that is replaced, never mutated,
on every transition. Parent and child filters therefore always change
together.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .precinct import PrecinctId, SCOPE_SEPARATOR
from .voter import VoterRecord


class SearchMode(str, Enum):
    """Which strategy the next search uses."""

    FUZZY = "fuzzy"
    EXACT = "exact"


@dataclass(frozen=True)
class FilterSelection:
    """Currently chosen local body, ward and polling station."""

    local_body: str
    ward: str
    polling_station: str

    @property
    def scope_id(self) -> str:
        return SCOPE_SEPARATOR.join((self.local_body, self.ward, self.polling_station))

    @property
    def precinct(self) -> PrecinctId:
        return PrecinctId(self.local_body, self.ward, self.polling_station)

    @classmethod
    def from_precinct(cls, precinct: PrecinctId) -> "FilterSelection":
        return cls(*precinct.as_tuple())


@dataclass(frozen=True)
class ViewState:
    """Everything the view renders."""

    selection: FilterSelection
    query_text: str = ""
    mode: SearchMode = SearchMode.FUZZY
    field: str = "name"
    results: Tuple[VoterRecord, ...] = ()
    loading: bool = False
    error: Optional[str] = None

    @property
    def scope_id(self) -> str:
        return self.selection.scope_id

    @property
    def result_count(self) -> int:
        return len(self.results)
