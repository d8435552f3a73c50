"""
Application state for one roll-browsing session.

RollSession ties the catalog, the record store and the search executor
together and owns the only mutable references in the application: the
current ViewState and the loaded ScopeSnapshot. Both are replaced
wholesale on every transition.

Scope loads and searches are queued on a single worker thread, so at
most one store query runs at a time and operations complete in the
order they were requested. Each load is tagged with the scope id it
was started for; a load that finishes after the selection has moved
on is discarded.

Usage:
    with RollSession.start() as session:
        session.select_ward("021").result()
        outcome = session.search("ramesh")
        for voter in outcome.records:
            print(voter.epic_no, voter.name)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple, Union

from .catalog import Catalog, Reconciliation
from .config import Config, SEARCH_FIELDS, get_config
from .exceptions import QueryFailure, ScopeNotFound, ValidationError
from .models import FilterSelection, SearchMode, ViewState
from .persistence import RecordStore, SQLiteRecordStore
from .search import ScopeSnapshot, SearchExecutor, SearchOutcome, load_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOptions:
    """Values each cascading filter offers for the current selection."""
    local_bodies: Tuple[str, ...]
    wards: Tuple[str, ...]
    polling_stations: Tuple[str, ...]


def _done(result) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


def open_store(config: Optional[Config] = None, catalog: Optional[Catalog] = None) -> SQLiteRecordStore:
    """
    Open the roll database and report catalogued scopes it lacks.

    Raises:
        StoreUnavailable: if the database cannot be fetched or read
    """
    config = config or get_config()
    catalog = catalog or Catalog.from_config(config)
    store = SQLiteRecordStore.from_config(config.store, config.search)

    missing = store.missing_scopes(catalog.entries)
    if missing:
        logger.warning(
            f"{len(missing)} catalogued scope(s) have no table in the database: "
            f"{', '.join(missing)}"
        )
    return store


class RollSession:
    """
    Filter selection, loaded scope and search results for one user.
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: Catalog,
        config: Optional[Config] = None,
        owns_store: bool = True,
    ):
        """
        Initialize session. Nothing is loaded until ``load_current_scope()``.

        Args:
            store: Open record store
            catalog: Precinct catalog
            config: Application configuration
            owns_store: Close the store with the session. Pass False for a
                store shared by several sessions.
        """
        self.config = config or get_config()
        self.store = store
        self.owns_store = owns_store
        self.catalog = catalog
        self.executor = SearchExecutor(store)

        search_config = self.config.search
        selection = catalog.initial_selection(self.config.catalog.default_scope)
        self._state = ViewState(
            selection=selection,
            mode=SearchMode.FUZZY if search_config.fuzzy_by_default else SearchMode.EXACT,
            field=search_config.default_field,
            loading=True,
        )
        self._snapshot = ScopeSnapshot.empty(selection.scope_id)
        self._lock = threading.Lock()
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rollsearch")

    @classmethod
    def start(
        cls,
        config: Optional[Config] = None,
        store: Optional[RecordStore] = None,
    ) -> "RollSession":
        """
        Open the roll database and load the initial scope.

        A ``store`` passed in is shared: it is used as is and left open
        when the session closes.

        Raises:
            StoreUnavailable: if the database cannot be fetched or read
            ConfigurationError: if the catalog is empty or malformed
        """
        config = config or get_config()
        catalog = Catalog.from_config(config)
        owns_store = store is None
        if owns_store:
            store = open_store(config, catalog)

        session = cls(store, catalog, config, owns_store=owns_store)
        try:
            session.load_current_scope()
        except Exception:
            session.close()
            raise
        return session

    # State access

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def snapshot(self) -> ScopeSnapshot:
        return self._snapshot

    def filter_options(self) -> FilterOptions:
        selection = self._state.selection
        return FilterOptions(
            local_bodies=self.catalog.local_bodies(),
            wards=self.catalog.wards(selection.local_body),
            polling_stations=self.catalog.polling_stations(selection.local_body, selection.ward),
        )

    # Scope loading

    def load_current_scope(self) -> ViewState:
        """Load the selected scope and wait for it."""
        self._worker.submit(self._load, self._state.scope_id).result()
        return self._state

    def _load(self, scope_id: str) -> bool:
        error = None
        try:
            snapshot = load_snapshot(self.store, scope_id, self.config.search)
        except ScopeNotFound as e:
            logger.warning(f"Scope {scope_id} has no table; showing no voters")
            snapshot, error = ScopeSnapshot.empty(scope_id), e.message
        except QueryFailure as e:
            logger.error(f"Failed to load scope {scope_id}: {e}")
            snapshot, error = ScopeSnapshot.empty(scope_id), e.message
        return self._apply_snapshot(snapshot, error)

    def _apply_snapshot(self, snapshot: ScopeSnapshot, error: Optional[str]) -> bool:
        with self._lock:
            if snapshot.scope_id != self._state.scope_id:
                logger.debug(
                    f"Discarding stale load for {snapshot.scope_id} "
                    f"(selection is now {self._state.scope_id})"
                )
                return False
            self._snapshot = snapshot
            self._state = replace(
                self._state, results=snapshot.records, loading=False, error=error
            )
            return True

    def _change_selection(self, choose: Callable[[FilterSelection], Reconciliation]) -> Future:
        with self._lock:
            # Reconciled against the selection held under the lock
            reconciliation = choose(self._state.selection)
            if reconciliation.selection == self._state.selection:
                return _done(False)
            self._state = replace(
                self._state,
                selection=reconciliation.selection,
                query_text="",
                loading=True,
                error=None,
            )
            scope_id = self._state.scope_id

        logger.info(f"Scope changed to {scope_id}")
        return self._worker.submit(self._load, scope_id)

    def select_local_body(self, local_body: str) -> Future:
        """
        Select a local body; ward and polling station reset if no longer valid.

        Returns:
            Future resolving to True if the load was applied, False if it
            was superseded by a later selection
        """
        return self._change_selection(
            lambda selection: self.catalog.select_local_body(selection, local_body)
        )

    def select_ward(self, ward: str) -> Future:
        """Select a ward; the polling station resets if no longer valid."""
        return self._change_selection(
            lambda selection: self.catalog.select_ward(selection, ward)
        )

    def select_polling_station(self, polling_station: str) -> Future:
        return self._change_selection(
            lambda selection: self.catalog.select_polling_station(selection, polling_station)
        )

    # Search inputs (no search is run)

    def set_query(self, query_text: str) -> ViewState:
        with self._lock:
            self._state = replace(self._state, query_text=query_text)
            return self._state

    def set_mode(self, mode: Union[SearchMode, str]) -> ViewState:
        """Switch strategy for the next search; current results stay as they are."""
        with self._lock:
            self._state = replace(self._state, mode=SearchMode(mode))
            return self._state

    def set_field(self, field: str) -> ViewState:
        if field not in SEARCH_FIELDS:
            raise ValidationError(
                f"Field '{field}' is not searchable",
                field_name="field",
                field_value=field,
                expected=", ".join(SEARCH_FIELDS),
            )
        with self._lock:
            self._state = replace(self._state, field=field)
            return self._state

    # Search

    def search(
        self,
        query_text: Optional[str] = None,
        mode: Optional[Union[SearchMode, str]] = None,
        field: Optional[str] = None,
    ) -> SearchOutcome:
        """
        Run a search against the selected scope and show its results.

        Arguments left as None come from the current state. Pending scope
        loads finish first.

        Raises:
            ValidationError: if exact mode is asked for an unsupported field
        """
        return self._worker.submit(self._search, query_text, mode, field).result()

    def _search(
        self,
        query_text: Optional[str],
        mode: Optional[Union[SearchMode, str]],
        field: Optional[str],
    ) -> SearchOutcome:
        with self._lock:
            state, snapshot = self._state, self._snapshot

        query_text = state.query_text if query_text is None else query_text
        mode = state.mode if mode is None else SearchMode(mode)
        field = state.field if field is None else field

        outcome = self.executor.execute(snapshot, query_text, mode, field)

        with self._lock:
            if self._state.scope_id != snapshot.scope_id:
                logger.debug(f"Discarding search results for stale scope {snapshot.scope_id}")
                return outcome
            self._state = replace(
                self._state,
                query_text=query_text,
                mode=mode,
                field=field,
                results=outcome.records,
                error=outcome.error,
            )
        return outcome

    def wait(self) -> None:
        """Block until queued loads and searches have finished."""
        self._worker.submit(lambda: None).result()

    def close(self) -> None:
        self._worker.shutdown(wait=True)
        if self.owns_store:
            self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
