"""
Weighted fuzzy index over a precinct's voter records.

Each searchable field is scored on its own with rapidfuzz's best
aligned partial match, then the per-field scores are combined by
weight. Scores run from 0 (perfect) to 1 (no match); lower ranks first.

Per field:
    score = (1 - partial_ratio / 100) + match_start / distance

A field shorter than the query is compared whole with a plain ratio, so
a short value that merely occurs inside the query is not a perfect hit.

A field counts only if its score is within ``threshold``. A record's
score is the product of ``max(field_score, EPSILON) ** weight`` over
its matching fields, so records that match well on several heavy
fields rank above records that match on one light field.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from rapidfuzz import fuzz, utils

from ..config import DEFAULT_FUZZY_WEIGHTS
from ..models import VoterRecord

EPSILON = sys.float_info.epsilon

# Float slack when comparing a score against the threshold
_TOLERANCE = 1e-9


@dataclass(frozen=True)
class FuzzyMatch:
    """One ranked hit."""
    record: VoterRecord
    score: float
    position: int  # index of the record in the indexed sequence


class FuzzyIndex:
    """
    Immutable ranked-matching index.

    Built once per loaded scope; a new scope gets a new index.

    Usage:
        index = FuzzyIndex.build(records)
        for match in index.search("ramesh"):
            print(match.record.name, match.score)
    """

    def __init__(
        self,
        records: Iterable[VoterRecord],
        weights: Optional[Mapping[str, float]] = None,
        threshold: float = 0.3,
        distance: int = 100,
    ):
        weights = dict(weights or DEFAULT_FUZZY_WEIGHTS)
        total = sum(weights.values())

        self.threshold = threshold
        self.distance = distance
        self.weights: Dict[str, float] = {key: w / total for key, w in weights.items()}
        self._records: Tuple[VoterRecord, ...] = tuple(records)
        # Processed field text per record, skipping null/blank fields
        self._fields: Tuple[Tuple[Tuple[str, str], ...], ...] = tuple(
            self._prepare(record) for record in self._records
        )

    @classmethod
    def build(
        cls,
        records: Iterable[VoterRecord],
        weights: Optional[Mapping[str, float]] = None,
        threshold: float = 0.3,
        distance: int = 100,
    ) -> "FuzzyIndex":
        return cls(records, weights=weights, threshold=threshold, distance=distance)

    def _prepare(self, record: VoterRecord) -> Tuple[Tuple[str, str], ...]:
        prepared = []
        for key in self.weights:
            value = record.get(key)
            if value is None:
                continue
            text = utils.default_process(str(value))
            if text:
                prepared.append((key, text))
        return tuple(prepared)

    @property
    def records(self) -> Tuple[VoterRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def field_score(self, query: str, text: str) -> Optional[float]:
        """
        Score one processed field against a processed query.

        Returns:
            Score in [0, threshold], or None if the field does not match
        """
        if len(text) < len(query):
            # partial_ratio would slide the field across the query instead
            score = 1.0 - fuzz.ratio(query, text) / 100.0
        else:
            cutoff = max(0.0, (1.0 - self.threshold) * 100 - _TOLERANCE)
            alignment = fuzz.partial_ratio_alignment(query, text, score_cutoff=cutoff)
            if alignment is None:
                return None
            error = 1.0 - alignment.score / 100.0
            drift = abs(alignment.dest_start) / self.distance
            score = min(1.0, error + drift)

        if score > self.threshold + _TOLERANCE:
            return None
        return score

    def score_record(self, query: str, position: int) -> Optional[float]:
        """Combined score of one record, or None if no field matches."""
        total = 1.0
        matched = False
        for key, text in self._fields[position]:
            field_score = self.field_score(query, text)
            if field_score is None:
                continue
            matched = True
            total *= max(field_score, EPSILON) ** self.weights[key]
        return total if matched else None

    def search(self, query: str, limit: Optional[int] = None) -> List[FuzzyMatch]:
        """
        Rank records against a free-text query.

        Best match first; equal scores keep their original record order.
        """
        processed = utils.default_process(query or "")
        if not processed:
            return []

        matches = []
        for position, record in enumerate(self._records):
            score = self.score_record(processed, position)
            if score is not None:
                matches.append(FuzzyMatch(record=record, score=score, position=position))

        matches.sort(key=lambda m: m.score)
        if limit is not None:
            matches = matches[:limit]
        return matches
