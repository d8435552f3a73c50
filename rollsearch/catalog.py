"""
Precinct catalog and cascading filter resolution.

The catalog is the static, ordered list of precinct tables. Every value
offered by the three cascading filters (local body, ward, polling
station) is derived from it, and a selection whose child filter no
longer exists under a new parent is reset to the first valid value.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple
import logging

from .config import Config, DEFAULT_CATALOG
from .exceptions import ConfigurationError
from .models import PrecinctId, FilterSelection, SCOPE_SEPARATOR

logger = logging.getLogger(__name__)


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    """Distinct values in first-seen order."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class Reconciliation:
    """Result of fitting a selection to the catalog."""

    selection: FilterSelection
    local_body_reset: bool = False
    ward_reset: bool = False
    polling_station_reset: bool = False

    @property
    def changed(self) -> bool:
        return self.local_body_reset or self.ward_reset or self.polling_station_reset


class Catalog:
    """
    Immutable ordered set of known precincts.

    Usage:
        catalog = Catalog(["A_1_1", "A_1_2", "A_2_1"])
        catalog.wards("A")                 # ("1", "2")
        catalog.polling_stations("A", "2") # ("1",)
    """

    def __init__(self, entries: Iterable[str]):
        precincts = _unique(PrecinctId.parse(entry) for entry in entries)
        if not precincts:
            raise ConfigurationError("Precinct catalog is empty", config_key="ROLL_CATALOG")
        self._precincts: Tuple[PrecinctId, ...] = precincts

    @classmethod
    def from_config(cls, config: Config) -> "Catalog":
        """
        Build the catalog from configuration.

        Inline entries win over a catalog file; with neither, the
        built-in list is used.
        """
        if config.catalog.entries:
            return cls(config.catalog.entries)

        if config.catalog.file:
            return cls.from_file(Path(config.catalog.file))

        return cls(DEFAULT_CATALOG)

    @classmethod
    def from_file(cls, path: Path) -> "Catalog":
        """Read one precinct identifier per line; ``#`` starts a comment."""
        if not path.is_file():
            raise ConfigurationError(
                f"Catalog file not found: {path}", config_key="ROLL_CATALOG_FILE"
            )
        entries = []
        for raw_line in path.read_text(encoding="utf-8").splitlines():
            line = raw_line.split("#", 1)[0].strip()
            if line:
                entries.append(line)
        return cls(entries)

    @property
    def precincts(self) -> Tuple[PrecinctId, ...]:
        return self._precincts

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(p.scope_id for p in self._precincts)

    def __contains__(self, scope_id: object) -> bool:
        return scope_id in self.entries

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self._precincts)

    # Filter values

    def local_bodies(self) -> Tuple[str, ...]:
        return _unique(p.local_body for p in self._precincts)

    def wards(self, local_body: str) -> Tuple[str, ...]:
        return _unique(p.ward for p in self._precincts if p.local_body == local_body)

    def polling_stations(self, local_body: str, ward: str) -> Tuple[str, ...]:
        return _unique(
            p.polling_station
            for p in self._precincts
            if p.local_body == local_body and p.ward == ward
        )

    # Identifiers

    @staticmethod
    def scope_id(local_body: str, ward: str, polling_station: str) -> str:
        """Canonical table name for a precinct."""
        return SCOPE_SEPARATOR.join((local_body, ward, polling_station))

    @staticmethod
    def resolve(entry: str) -> PrecinctId:
        return PrecinctId.parse(entry)

    # Selection handling

    def reconcile(self, selection: FilterSelection) -> Reconciliation:
        """
        Fit a selection to the catalog, top-down.

        Each level that is not valid under its (possibly just reset)
        parent is replaced by the first valid value at that level.
        """
        local_bodies = self.local_bodies()
        local_body = selection.local_body
        local_body_reset = local_body not in local_bodies
        if local_body_reset:
            local_body = local_bodies[0]

        wards = self.wards(local_body)
        ward = selection.ward
        ward_reset = ward not in wards
        if ward_reset:
            ward = wards[0]

        stations = self.polling_stations(local_body, ward)
        polling_station = selection.polling_station
        polling_station_reset = polling_station not in stations
        if polling_station_reset:
            polling_station = stations[0]

        reconciled = FilterSelection(local_body, ward, polling_station)
        if reconciled != selection:
            logger.debug(f"Selection {selection.scope_id} reset to {reconciled.scope_id}")

        return Reconciliation(
            selection=reconciled,
            local_body_reset=local_body_reset,
            ward_reset=ward_reset,
            polling_station_reset=polling_station_reset,
        )

    def initial_selection(self, preferred_scope_id: Optional[str] = None) -> FilterSelection:
        """The preferred scope if it is catalogued, else the first entry."""
        if preferred_scope_id and preferred_scope_id in self:
            return FilterSelection.from_precinct(PrecinctId.parse(preferred_scope_id))
        if preferred_scope_id:
            logger.warning(
                f"Default scope '{preferred_scope_id}' is not in the catalog, "
                f"using {self._precincts[0].scope_id}"
            )
        return FilterSelection.from_precinct(self._precincts[0])

    def select_local_body(self, selection: FilterSelection, local_body: str) -> Reconciliation:
        """Change the local body, resetting ward and polling station if needed."""
        return self.reconcile(
            FilterSelection(local_body, selection.ward, selection.polling_station)
        )

    def select_ward(self, selection: FilterSelection, ward: str) -> Reconciliation:
        """Change the ward, resetting the polling station if needed."""
        return self.reconcile(
            FilterSelection(selection.local_body, ward, selection.polling_station)
        )

    def select_polling_station(
        self, selection: FilterSelection, polling_station: str
    ) -> Reconciliation:
        return self.reconcile(
            FilterSelection(selection.local_body, selection.ward, polling_station)
        )
