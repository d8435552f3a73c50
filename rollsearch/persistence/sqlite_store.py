"""
SQLite record store.

The roll database is a single SQLite file with one table per precinct.
It is opened once, read-only, and kept open for the process lifetime.
A remote database (http/https source) is downloaded once into a
temporary file first.
"""
from __future__ import annotations

import logging
import os
import sqlite3
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config import StoreConfig, SearchConfig
from ..exceptions import StoreUnavailable, ScopeNotFound, QueryFailure
from ..models import VoterRecord
from .repository import RecordStore

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def quote_identifier(name: str) -> str:
    """Quote a table or column name for SQLite."""
    return '"' + name.replace('"', '""') + '"'


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _is_remote(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


class SQLiteRecordStore(RecordStore):
    """
    Read-only SQLite repository for per-precinct voter tables.

    Handles:
    - Fetching the database (local path or URL)
    - Validating it is a readable SQLite file
    - Scope-qualified, parameter-bound retrieval queries

    Table and column names cannot be bound as parameters, so they are
    checked against the schema and quoted before they reach SQL.

    Exact search is case-insensitive by default (SQLite LIKE, which folds
    ASCII letters only). With ``case_sensitive=True`` it uses ``instr``.
    """

    def __init__(
        self,
        source: str,
        case_sensitive: bool = False,
        download_timeout_sec: int = 60,
    ):
        """
        Initialize store. Call ``connect()`` (or use ``open()``) before querying.

        Args:
            source: Path or http(s) URL of the database file
            case_sensitive: Whether exact search distinguishes case
            download_timeout_sec: Timeout for fetching a remote database
        """
        self.source = str(source)
        self.case_sensitive = case_sensitive
        self.download_timeout_sec = download_timeout_sec
        self._conn: Optional[sqlite3.Connection] = None
        self._tables: Tuple[str, ...] = ()
        self._columns: Dict[str, Tuple[str, ...]] = {}
        self._downloaded_path: Optional[Path] = None
        self._lock = threading.Lock()

    @classmethod
    def open(
        cls,
        source: str,
        case_sensitive: bool = False,
        download_timeout_sec: int = 60,
    ) -> "SQLiteRecordStore":
        """
        Open a store and validate it.

        Raises:
            StoreUnavailable: if the database cannot be fetched or read
        """
        store = cls(source, case_sensitive=case_sensitive, download_timeout_sec=download_timeout_sec)
        store.connect()
        return store

    @classmethod
    def from_config(cls, store_config: StoreConfig, search_config: SearchConfig) -> "SQLiteRecordStore":
        return cls.open(
            store_config.source,
            case_sensitive=search_config.exact_case_sensitive,
            download_timeout_sec=store_config.download_timeout_sec,
        )

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Fetch (if remote), open read-only and read the table list."""
        if self._conn is not None:
            return

        path = self._download() if _is_remote(self.source) else Path(self.source)
        if not path.is_file():
            raise StoreUnavailable(f"Roll database not found: {path}", source=self.source)

        conn = None
        try:
            conn = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro",
                uri=True,
                check_same_thread=False,
            )
            rows = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            ).fetchall()
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            self._cleanup_download()
            logger.error(f"Failed to open roll database {self.source}: {e}")
            raise StoreUnavailable(
                f"Could not read roll database: {e}", source=self.source
            ) from e

        tables = tuple(row[0] for row in rows if not row[0].startswith("sqlite_"))
        if not tables:
            # An empty file (or empty download) opens as a database with no tables
            conn.close()
            self._cleanup_download()
            logger.error(f"Roll database {self.source} has no tables")
            raise StoreUnavailable(
                f"Roll database has no precinct tables: {path}", source=self.source
            )

        self._conn = conn
        self._tables = tables
        logger.info(f"Opened roll database {self.source} ({len(self._tables)} tables)")

    def _download(self) -> Path:
        """Download a remote database into a temporary file."""
        logger.info(f"Downloading roll database from {self.source}")
        try:
            response = requests.get(self.source, timeout=self.download_timeout_sec)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download roll database: {e}")
            raise StoreUnavailable(f"Could not load DB: {e}", source=self.source) from e

        fd, name = tempfile.mkstemp(prefix="rollsearch-", suffix=".db")
        with os.fdopen(fd, "wb") as f:
            f.write(response.content)

        self._downloaded_path = Path(name)
        logger.debug(f"Roll database saved to {name} ({len(response.content)} bytes)")
        return self._downloaded_path

    def _cleanup_download(self) -> None:
        if self._downloaded_path is not None:
            self._downloaded_path.unlink(missing_ok=True)
            self._downloaded_path = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    def _require_table(self, scope_id: str) -> str:
        self._get_connection()
        if scope_id not in self._tables:
            raise ScopeNotFound(scope_id)
        return scope_id

    def _query(self, sql: str, params: Tuple[Any, ...] = ()) -> List[VoterRecord]:
        """Run a SELECT and map rows to records."""
        conn = self._get_connection()
        with self._lock:
            cursor = conn.execute(sql, params)
            try:
                columns = [d[0] for d in cursor.description]
                rows = cursor.fetchall()
            finally:
                cursor.close()
        return [VoterRecord.from_row(columns, row) for row in rows]

    # RecordStore interface

    def list_scopes(self) -> Tuple[str, ...]:
        self._get_connection()
        return self._tables

    def columns(self, scope_id: str) -> Tuple[str, ...]:
        table = self._require_table(scope_id)
        if table not in self._columns:
            conn = self._get_connection()
            with self._lock:
                info = conn.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
            self._columns[table] = tuple(row[1] for row in info)
        return self._columns[table]

    def fetch_all(self, scope_id: str) -> List[VoterRecord]:
        table = self._require_table(scope_id)
        sql = f"SELECT * FROM {quote_identifier(table)} ORDER BY rowid"
        try:
            return self._query(sql)
        except sqlite3.Error as e:
            raise QueryFailure(f"Failed to load scope {scope_id}", scope_id=scope_id, cause=e) from e

    def fetch_filtered(self, scope_id: str, field: str, substring: str) -> List[VoterRecord]:
        table = self._require_table(scope_id)
        if field not in self.columns(table):
            raise QueryFailure(
                f"Unknown field '{field}' in scope {scope_id}",
                scope_id=scope_id,
                field_name=field,
            )

        column = quote_identifier(field)
        if self.case_sensitive:
            sql = (
                f"SELECT * FROM {quote_identifier(table)} "
                f"WHERE instr({column}, ?) > 0 ORDER BY rowid"
            )
            params: Tuple[Any, ...] = (substring,)
        else:
            sql = (
                f"SELECT * FROM {quote_identifier(table)} "
                f"WHERE {column} LIKE ? ESCAPE '{LIKE_ESCAPE}' ORDER BY rowid"
            )
            params = (f"%{escape_like(substring)}%",)

        try:
            return self._query(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Exact search failed on {scope_id}.{field}: {e}")
            raise QueryFailure(
                "Search query failed", scope_id=scope_id, field_name=field, cause=e
            ) from e

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug(f"Closed roll database {self.source}")
        self._cleanup_download()
