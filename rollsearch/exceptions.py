"""
Custom exceptions for the roll search application.

All application-specific exceptions inherit from RollSearchError.
"""

from __future__ import annotations

from typing import Optional, Any, List


class RollSearchError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details (for debugging)
        recoverable: Whether the error can potentially be recovered from
    """

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(RollSearchError):
    """
    Invalid or missing configuration.

    Examples:
        - Empty precinct catalog
        - Fuzzy threshold outside 0-1
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        details = {"config_key": config_key} if config_key else None
        super().__init__(message, details=details, recoverable=False)


class StoreUnavailable(RollSearchError):
    """
    The roll database could not be fetched or opened.

    Fatal for the session: the database is loaded once at startup.
    """

    DEFAULT_REMEDIATION = [
        "Check that the database file exists at the configured ROLL_DB_SOURCE",
        "If ROLL_DB_SOURCE is a URL, check that it is reachable from this machine",
        "Check that the file is a valid SQLite database and not truncated",
        "Restart the application once the database is in place",
    ]

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        remediation: Optional[List[str]] = None
    ):
        details: dict[str, Any] = {}
        if source:
            details["source"] = source
        details["remediation"] = list(remediation or self.DEFAULT_REMEDIATION)
        super().__init__(message, details=details, recoverable=False)

    @property
    def remediation(self) -> List[str]:
        return self.details["remediation"]


class ScopeNotFound(RollSearchError):
    """
    The selected precinct has no backing table.

    Only happens when the catalog and the database drift apart; the
    caller shows an empty result set and logs a diagnostic.
    """

    def __init__(self, scope_id: str):
        super().__init__(
            f"No table for scope '{scope_id}'",
            details={"scope_id": scope_id},
            recoverable=True,
        )
        self.scope_id = scope_id


class QueryFailure(RollSearchError):
    """
    An exact-search query could not be run.

    Examples:
        - Unknown column
        - SQLite error while executing the query
    """

    def __init__(
        self,
        message: str,
        scope_id: Optional[str] = None,
        field_name: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        details = {}
        if scope_id:
            details["scope_id"] = scope_id
        if field_name:
            details["field_name"] = field_name
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, details=details, recoverable=True)


class ValidationError(RollSearchError):
    """
    Data validation failed.

    Examples:
        - Malformed precinct identifier
        - Search field not offered for exact search
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        expected: Optional[str] = None
    ):
        details = {}
        if field_name:
            details["field_name"] = field_name
        if field_value is not None:
            details["field_value"] = str(field_value)[:100]
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details, recoverable=False)
