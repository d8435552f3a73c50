import sqlite3

import pytest

from rollsearch.config import CatalogConfig, Config, SearchConfig, StoreConfig
from rollsearch.catalog import Catalog
from rollsearch.persistence import SQLiteRecordStore

COLUMNS = ("sl_no", "epic_no", "name", "fh_name", "house_no", "house_name", "sex_age")

ROWS = {
    "A_1_1": [
        (1, "ABC1234567", "RAMESH KUMAR", "SURESH KUMAR", "12", "Rose Villa", "M 42"),
        (2, "ABC1234568", "LAKSHMI", "RAMESH KUMAR", "12", "Rose Villa", "F 38"),
        (3, "XYZ7654321", "ANIL_100%", "GOPALAN", "7A", "Kizhakkethil", "M 55"),
        (4, "XYZ7654322", "Meera Nair", "ANIL", "9", None, "F/29"),
        (5, "DEF1111111", "Thomas", None, None, "Thekkumkara", "M 61"),
    ],
    "A_1_2": [
        (1, "GHI2222222", "SREEDEVI", "MOHANAN", "3", "Sreeragam", "F 47"),
        (2, "GHI2222223", "JOHN", "PAUL", "4", "Puthenpura", "M 33"),
    ],
    "A_2_1": [
        (1, "JKL3333333", "FATHIMA", "ABDUL", "21", "Manzil", "F 26"),
    ],
}

CATALOG = ("A_1_1", "A_1_2", "A_2_1")


def build_roll_db(path, rows=ROWS):
    conn = sqlite3.connect(path)
    try:
        for table, table_rows in rows.items():
            conn.execute(
                f'CREATE TABLE "{table}" ('
                "sl_no INTEGER, epic_no TEXT, name TEXT, fh_name TEXT, "
                "house_no TEXT, house_name TEXT, sex_age TEXT)"
            )
            conn.executemany(
                f'INSERT INTO "{table}" VALUES (?, ?, ?, ?, ?, ?, ?)', table_rows
            )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def roll_db(tmp_path):
    return build_roll_db(tmp_path / "voters_database.db")


@pytest.fixture
def store(roll_db):
    store = SQLiteRecordStore.open(str(roll_db))
    yield store
    store.close()


@pytest.fixture
def catalog():
    return Catalog(CATALOG)


@pytest.fixture
def make_config(roll_db, tmp_path):
    def _make(entries=CATALOG, default_scope="A_1_1", **search):
        return Config(
            logs_dir=tmp_path / "logs",
            log_to_file=False,
            store=StoreConfig(source=str(roll_db)),
            catalog=CatalogConfig(entries=tuple(entries), file="", default_scope=default_scope),
            search=SearchConfig(**search),
        )
    return _make


@pytest.fixture
def config(make_config):
    return make_config()
