"""
Loaded scope: a precinct's full record set plus its fuzzy index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import logging

from ..config import SearchConfig
from ..models import VoterRecord
from ..persistence import RecordStore
from ..utils import timed_operation, format_duration
from .fuzzy import FuzzyIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeSnapshot:
    """Unfiltered records of one scope and the index built over them."""

    scope_id: str
    records: Tuple[VoterRecord, ...]
    index: FuzzyIndex

    @classmethod
    def empty(cls, scope_id: str) -> "ScopeSnapshot":
        return cls(scope_id=scope_id, records=(), index=FuzzyIndex.build(()))


def load_snapshot(
    store: RecordStore,
    scope_id: str,
    search_config: SearchConfig,
) -> ScopeSnapshot:
    """
    Fetch a scope and index it, as one step.

    Raises:
        ScopeNotFound: if the store has no table for the scope
    """
    with timed_operation(f"Load {scope_id}", logger) as timing:
        records = tuple(store.fetch_all(scope_id))
        index = FuzzyIndex.build(
            records,
            weights=search_config.weights,
            threshold=search_config.threshold,
            distance=search_config.distance,
        )

    logger.info(f"Loaded {len(records)} voters for {scope_id} in {format_duration(timing.duration_sec)}")
    return ScopeSnapshot(scope_id=scope_id, records=records, index=index)
