"""
Precinct identifiers.

A precinct is addressed by three nested codes: local body, ward and
polling station. The canonical string form (``G02053_022_001``) is also
the name of the precinct's table in the roll database.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import re

from ..exceptions import ValidationError

SCOPE_SEPARATOR = "_"

_PART_RE = re.compile(r"[A-Za-z0-9]+")


@dataclass(frozen=True)
class PrecinctId:
    """Composite key of one precinct table."""

    local_body: str
    ward: str
    polling_station: str

    def __post_init__(self):
        for name, value in self.__dict__.items():
            if not isinstance(value, str) or not _PART_RE.fullmatch(value):
                raise ValidationError(
                    "Precinct code parts must be non-empty alphanumeric strings",
                    field_name=name,
                    field_value=value,
                    expected="alphanumeric code",
                )

    @property
    def scope_id(self) -> str:
        return SCOPE_SEPARATOR.join(self.as_tuple())

    def as_tuple(self) -> Tuple[str, str, str]:
        return (self.local_body, self.ward, self.polling_station)

    @classmethod
    def parse(cls, entry: str) -> "PrecinctId":
        """
        Parse ``localBody_ward_pollingStation``.

        Raises:
            ValidationError: if the entry does not have exactly three parts
        """
        parts = str(entry).strip().split(SCOPE_SEPARATOR)
        if len(parts) != 3:
            raise ValidationError(
                f"Malformed precinct identifier '{entry}'",
                field_name="scope_id",
                field_value=entry,
                expected="localBody_ward_pollingStation",
            )
        return cls(*parts)

    def __str__(self) -> str:
        return self.scope_id
