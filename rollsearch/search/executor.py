"""
Search dispatch.

Runs one of three paths against a loaded scope:
- empty query  -> the scope's full record set, unchanged
- fuzzy mode   -> ranked hits from the scope's fuzzy index
- exact mode   -> substring match on one field, in store row order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..config import SEARCH_FIELDS
from ..exceptions import QueryFailure, ScopeNotFound, ValidationError
from ..models import SearchMode, VoterRecord
from ..persistence import RecordStore
from ..utils import timed_operation
from .snapshot import ScopeSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    """Records to display plus how they were produced."""

    records: Tuple[VoterRecord, ...]
    query: str
    mode: Optional[SearchMode]  # None when no filter was applied
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def filtered(self) -> bool:
        return self.mode is not None


class SearchExecutor:
    """Answers queries for whichever scope snapshot it is given."""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(
        self,
        snapshot: ScopeSnapshot,
        query_text: Optional[str],
        mode: Union[SearchMode, str] = SearchMode.FUZZY,
        field: str = "name",
    ) -> SearchOutcome:
        """
        Run a search against a loaded scope.

        Args:
            snapshot: Loaded scope (full records and index)
            query_text: Free text; surrounding whitespace is ignored
            mode: fuzzy or exact
            field: Column for exact mode (ignored in fuzzy mode)

        Returns:
            SearchOutcome; zero hits or a failed exact query give an
            empty record tuple, never an exception

        Raises:
            ValidationError: if exact mode is asked for an unsupported field
        """
        mode = SearchMode(mode)
        query = (query_text or "").strip()

        if not query:
            return SearchOutcome(records=snapshot.records, query=query, mode=None)

        if mode is SearchMode.EXACT and field not in SEARCH_FIELDS:
            raise ValidationError(
                f"Field '{field}' is not searchable",
                field_name="field",
                field_value=field,
                expected=", ".join(SEARCH_FIELDS),
            )

        with timed_operation(f"{mode.value} search '{query}' in {snapshot.scope_id}", logger) as timing:
            if mode is SearchMode.FUZZY:
                records = tuple(match.record for match in snapshot.index.search(query))
                error = None
            else:
                records, error = self._exact(snapshot.scope_id, field, query)

        return SearchOutcome(
            records=records,
            query=query,
            mode=mode,
            error=error,
            elapsed_ms=timing.duration_ms,
        )

    def _exact(self, scope_id: str, field: str, query: str) -> Tuple[Tuple[VoterRecord, ...], Optional[str]]:
        try:
            return tuple(self.store.fetch_filtered(scope_id, field, query)), None
        except ScopeNotFound as e:
            logger.warning(f"Exact search on missing scope: {e}")
            return (), e.message
        except QueryFailure as e:
            logger.error(f"Exact search failed: {e}")
            return (), e.message
