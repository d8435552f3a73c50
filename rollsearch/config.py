"""
Centralized configuration management.

Configuration is loaded from:
1. Environment variables
2. .env file (if present)
3. Default values

Usage:
    from rollsearch.config import get_config
    config = get_config()
    print(config.store.source)  # voters_database.db unless ROLL_DB_SOURCE is set
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Dict

from .exceptions import ConfigurationError


def _load_dotenv(dotenv_path: Optional[Path] = None) -> None:
    """
    Minimal .env loader (no external dependency).

    Supports KEY=VALUE, ignores blank lines and comments (#).
    Does not override existing environment variables.
    """
    if dotenv_path is None:
        dotenv_path = Path(__file__).resolve().parent.parent / ".env"

    if not dotenv_path.exists() or not dotenv_path.is_file():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if not key:
            continue
        if os.getenv(key) in (None, ""):
            os.environ[key] = value


# Load .env on module import
_load_dotenv()


def _get_bool_env(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key, "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: Optional[float] = None) -> Optional[float]:
    """Get float from environment variable."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_list_env(key: str) -> Tuple[str, ...]:
    """Get comma-separated list from environment variable."""
    value = os.getenv(key, "")
    return tuple(part.strip() for part in value.split(",") if part.strip())


# Precinct tables shipped with the original roll database
DEFAULT_CATALOG: Tuple[str, ...] = (
    "G02053_022_001",
    "G02053_022_002",
    "G02053_021_001",
    "G02053_021_002",
    "G02053_024_001",
    "G02053_024_002",
)

# Relative importance of each field in fuzzy ranking
DEFAULT_FUZZY_WEIGHTS: Dict[str, float] = {
    "name": 0.5,
    "fh_name": 0.3,
    "house_name": 0.2,
    "epic_no": 0.4,
}

# Fields offered for exact (substring) search
SEARCH_FIELDS: Tuple[str, ...] = (
    "name",
    "epic_no",
    "fh_name",
    "house_name",
    "house_no",
    "sex_age",
)


@dataclass
class StoreConfig:
    """Backing roll database location."""
    # Local path or http(s) URL of the SQLite database file
    source: str = field(default_factory=lambda: os.getenv("ROLL_DB_SOURCE", "voters_database.db"))
    download_timeout_sec: int = field(
        default_factory=lambda: _get_int_env("ROLL_DB_DOWNLOAD_TIMEOUT_SEC", 60)
    )


@dataclass
class CatalogConfig:
    """Where the list of precinct tables comes from."""
    entries: Tuple[str, ...] = field(default_factory=lambda: _get_list_env("ROLL_CATALOG"))
    file: str = field(default_factory=lambda: os.getenv("ROLL_CATALOG_FILE", ""))
    default_scope: str = field(
        default_factory=lambda: os.getenv("ROLL_DEFAULT_SCOPE", "G02053_022_001")
    )


@dataclass
class SearchConfig:
    """Fuzzy and exact search tuning."""
    # 0 = exact only, 1 = anything matches
    threshold: float = field(
        default_factory=lambda: _get_float_env("FUZZY_THRESHOLD", 0.3)
    )
    # Characters a match may drift from the start of a field before it stops counting
    distance: int = field(default_factory=lambda: _get_int_env("FUZZY_DISTANCE", 100))
    weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_FUZZY_WEIGHTS))
    exact_case_sensitive: bool = field(
        default_factory=lambda: _get_bool_env("EXACT_CASE_SENSITIVE", False)
    )
    default_field: str = field(default_factory=lambda: os.getenv("SEARCH_DEFAULT_FIELD", "name"))
    fuzzy_by_default: bool = field(default_factory=lambda: _get_bool_env("FUZZY_BY_DEFAULT", True))

    def validate(self) -> None:
        """Raise ConfigurationError for out-of-range settings."""
        if self.threshold is None or not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(
                f"Fuzzy threshold must be between 0 and 1, got {self.threshold}",
                config_key="FUZZY_THRESHOLD",
            )
        if self.distance <= 0:
            raise ConfigurationError(
                f"Fuzzy distance must be positive, got {self.distance}",
                config_key="FUZZY_DISTANCE",
            )
        if not self.weights or any(w <= 0 for w in self.weights.values()):
            raise ConfigurationError("Fuzzy weights must be positive and non-empty")
        if self.default_field not in SEARCH_FIELDS:
            raise ConfigurationError(
                f"Unknown search field '{self.default_field}'",
                config_key="SEARCH_DEFAULT_FIELD",
            )


@dataclass
class Config:
    """
    Main application configuration.

    All settings are loaded from environment variables with sensible defaults.
    Set DEBUG=1 in environment to enable debug mode.
    """

    # Base directory (project root)
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    logs_dir: Path = field(default=None)

    # Debug mode (enables verbose console logging)
    debug: bool = field(default_factory=lambda: _get_bool_env("DEBUG", False))
    log_to_file: bool = field(default_factory=lambda: _get_bool_env("LOG_TO_FILE", True))

    # Sub-configurations
    store: StoreConfig = field(default_factory=StoreConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    def __post_init__(self):
        """Resolve paths and check values after initialization."""
        if self.logs_dir is None:
            self.logs_dir = self.base_dir / os.getenv("LOG_DIR", "logs")
        self.search.validate()


# Global config instance (lazily initialized)
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
