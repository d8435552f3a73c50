import os

import pytest

from rollsearch import config as config_module
from rollsearch.config import (
    DEFAULT_FUZZY_WEIGHTS,
    CatalogConfig,
    SearchConfig,
    StoreConfig,
    get_config,
    reset_config,
)
from rollsearch.exceptions import ConfigurationError


def test_defaults(monkeypatch):
    for key in ("ROLL_DB_SOURCE", "FUZZY_THRESHOLD", "FUZZY_DISTANCE", "EXACT_CASE_SENSITIVE", "ROLL_CATALOG"):
        monkeypatch.delenv(key, raising=False)

    search = SearchConfig()

    assert StoreConfig().source == "voters_database.db"
    assert search.threshold == 0.3
    assert search.distance == 100
    assert search.weights == DEFAULT_FUZZY_WEIGHTS
    assert search.exact_case_sensitive is False
    assert CatalogConfig().entries == ()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ROLL_DB_SOURCE", "https://example.test/voters.db")
    monkeypatch.setenv("FUZZY_THRESHOLD", "0.45")
    monkeypatch.setenv("EXACT_CASE_SENSITIVE", "yes")
    monkeypatch.setenv("ROLL_CATALOG", "A_1_1, A_1_2 ,,")

    assert StoreConfig().source == "https://example.test/voters.db"
    assert SearchConfig().threshold == 0.45
    assert SearchConfig().exact_case_sensitive is True
    assert CatalogConfig().entries == ("A_1_1", "A_1_2")


def test_unparseable_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("FUZZY_DISTANCE", "far")

    assert SearchConfig().distance == 100


@pytest.mark.parametrize(
    "kwargs",
    [
        {"threshold": 1.5},
        {"threshold": -0.1},
        {"distance": 0},
        {"weights": {}},
        {"weights": {"name": 0}},
        {"default_field": "sl_no"},
    ],
)
def test_validate_rejects_bad_values(kwargs):
    with pytest.raises(ConfigurationError):
        SearchConfig(**kwargs).validate()


def test_get_config_is_cached():
    reset_config()
    try:
        assert get_config() is get_config()
    finally:
        reset_config()


def test_dotenv_does_not_override_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\nROLL_TEST_NEW='from-file'\nROLL_TEST_SET=from-file\nnot a pair\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ROLL_TEST_SET", "from-env")
    monkeypatch.delenv("ROLL_TEST_NEW", raising=False)

    config_module._load_dotenv(env_file)
    try:
        assert os.environ["ROLL_TEST_NEW"] == "from-file"
        assert os.environ["ROLL_TEST_SET"] == "from-env"
    finally:
        os.environ.pop("ROLL_TEST_NEW", None)
