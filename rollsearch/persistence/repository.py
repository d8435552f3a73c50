"""
Repository pattern for roll record retrieval.

Defines the read-only interface the search layer depends on, so the
SQLite implementation can be swapped for another backend (or a test
double) without touching callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from ..models import VoterRecord


class RecordStore(ABC):
    """
    Abstract read-only store of per-precinct voter tables.

    Each precinct lives in its own table, named by its scope id
    (``G02053_022_001``). Implementations own a single handle for the
    process lifetime and run queries against it one at a time.
    """

    @abstractmethod
    def list_scopes(self) -> Tuple[str, ...]:
        """
        List every scope (table) the store holds.

        Returns:
            Table names
        """
        pass

    @abstractmethod
    def columns(self, scope_id: str) -> Tuple[str, ...]:
        """
        Column names of a scope table.

        Raises:
            ScopeNotFound: if the table does not exist
        """
        pass

    @abstractmethod
    def fetch_all(self, scope_id: str) -> List[VoterRecord]:
        """
        Retrieve every record of a scope, in row order.

        Args:
            scope_id: Precinct table name

        Returns:
            Records in store order

        Raises:
            ScopeNotFound: if the table does not exist
        """
        pass

    @abstractmethod
    def fetch_filtered(self, scope_id: str, field: str, substring: str) -> List[VoterRecord]:
        """
        Retrieve records whose ``field`` contains ``substring``, in row order.

        The substring is always passed as a bound parameter.

        Raises:
            ScopeNotFound: if the table does not exist
            QueryFailure: if the field is unknown or the query fails
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the store handle."""
        pass

    def missing_scopes(self, scope_ids: Iterable[str]) -> List[str]:
        """Scope ids with no backing table."""
        available = set(self.list_scopes())
        return [scope_id for scope_id in scope_ids if scope_id not in available]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
