"""
Voter record model.

Rows come out of per-precinct tables whose columns are not fixed, so a
record is an open read-only mapping rather than a fixed dataclass. The
display fields every table is expected to carry get typed accessors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional, Any, Iterator, Sequence
import re

# Columns every precinct table is expected to have
REQUIRED_FIELDS = (
    "epic_no",
    "name",
    "fh_name",
    "house_no",
    "house_name",
    "sex_age",
    "sl_no",
)

_SEX_AGE_RE = re.compile(r"^\s*([A-Za-z]+)\W*(\d{1,3})\s*$")


class VoterRecord(Mapping):
    """
    One row of a precinct table.

    Values are whatever SQLite returned: strings, numbers or None.
    Missing required columns read as None through the accessors.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **fields: Any):
        merged = dict(data or {})
        merged.update(fields)
        self._data = merged

    @classmethod
    def from_row(cls, columns: Sequence[str], row: Sequence[Any]) -> "VoterRecord":
        """Create a record from a column list and a row tuple."""
        return cls(dict(zip(columns, row)))

    # Mapping protocol

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VoterRecord):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"<VoterRecord {self.epic_no}: {self.name}>"

    # Display fields

    @property
    def epic_no(self) -> Optional[str]:
        return self._data.get("epic_no")

    @property
    def name(self) -> Optional[str]:
        return self._data.get("name")

    @property
    def fh_name(self) -> Optional[str]:
        """Father's or husband's (guardian) name."""
        return self._data.get("fh_name")

    @property
    def house_no(self) -> Optional[str]:
        return self._data.get("house_no")

    @property
    def house_name(self) -> Optional[str]:
        return self._data.get("house_name")

    @property
    def sex_age(self) -> Optional[str]:
        return self._data.get("sex_age")

    @property
    def sl_no(self) -> Any:
        return self._data.get("sl_no")

    @property
    def sex(self) -> Optional[str]:
        """Leading letter of ``sex_age`` (``M``, ``F``, ``T``), if parseable."""
        match = _SEX_AGE_RE.match(str(self.sex_age or ""))
        return match.group(1)[0].upper() if match else None

    @property
    def age(self) -> Optional[int]:
        match = _SEX_AGE_RE.match(str(self.sex_age or ""))
        return int(match.group(2)) if match else None

    @property
    def address(self) -> str:
        """House number and house name, as shown on the voter card."""
        parts = [str(p) for p in (self.house_no, self.house_name) if p not in (None, "")]
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return dict(self._data)
