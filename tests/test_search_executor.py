import pytest

from rollsearch.config import SearchConfig
from rollsearch.exceptions import QueryFailure, ValidationError
from rollsearch.models import SearchMode
from rollsearch.persistence import RecordStore
from rollsearch.search import SearchExecutor, load_snapshot


class FailingStore(RecordStore):
    def list_scopes(self):
        return ("A_1_1",)

    def columns(self, scope_id):
        return ()

    def fetch_all(self, scope_id):
        return []

    def fetch_filtered(self, scope_id, field, substring):
        raise QueryFailure("Search query failed", scope_id=scope_id, field_name=field)

    def close(self):
        pass


@pytest.fixture
def snapshot(store):
    return load_snapshot(store, "A_1_1", SearchConfig(threshold=0.3, distance=100))


@pytest.fixture
def executor(store):
    return SearchExecutor(store)


@pytest.mark.parametrize("query", ["", "   ", None, "\t\n"])
def test_empty_query_returns_full_scope(executor, snapshot, store, query):
    outcome = executor.execute(snapshot, query, SearchMode.EXACT, "name")

    assert list(outcome.records) == store.fetch_all("A_1_1")
    assert outcome.mode is None
    assert not outcome.filtered


def test_fuzzy_returns_ranked_records(executor, snapshot):
    outcome = executor.execute(snapshot, "  Meera Niar ", SearchMode.FUZZY)

    assert outcome.query == "Meera Niar"
    assert outcome.mode is SearchMode.FUZZY
    assert outcome.records[0].name == "Meera Nair"
    assert outcome.error is None


def test_fuzzy_ignores_field(executor, snapshot):
    by_name = executor.execute(snapshot, "Thomas", "fuzzy", "name")
    by_epic = executor.execute(snapshot, "Thomas", "fuzzy", "epic_no")

    assert by_name.records == by_epic.records


def test_exact_full_epic_returns_one_record(executor, snapshot):
    outcome = executor.execute(snapshot, "XYZ7654322", SearchMode.EXACT, "epic_no")

    assert [r.epic_no for r in outcome.records] == ["XYZ7654322"]


def test_exact_keeps_store_order(executor, snapshot):
    outcome = executor.execute(snapshot, "12", SearchMode.EXACT, "house_no")

    assert [r["sl_no"] for r in outcome.records] == [1, 2]


def test_exact_no_match_is_empty(executor, snapshot):
    outcome = executor.execute(snapshot, "ZZZ0000000", SearchMode.EXACT, "epic_no")

    assert outcome.records == ()
    assert outcome.count == 0
    assert outcome.error is None


def test_exact_strips_whitespace(executor, snapshot):
    outcome = executor.execute(snapshot, "  Thomas  ", SearchMode.EXACT, "name")

    assert outcome.query == "Thomas"
    assert [r.name for r in outcome.records] == ["Thomas"]


def test_exact_rejects_unsearchable_field(executor, snapshot):
    with pytest.raises(ValidationError):
        executor.execute(snapshot, "1", SearchMode.EXACT, "sl_no")


def test_empty_query_ignores_field(executor, snapshot):
    outcome = executor.execute(snapshot, "  ", SearchMode.EXACT, "sl_no")

    assert outcome.records == snapshot.records
    assert outcome.mode is None
    assert outcome.error is None


def test_exact_query_failure_gives_empty_result(snapshot):
    outcome = SearchExecutor(FailingStore()).execute(snapshot, "Thomas", SearchMode.EXACT, "name")

    assert outcome.records == ()
    assert outcome.error == "Search query failed"


def test_exact_on_missing_scope_gives_empty_result(executor, snapshot):
    from rollsearch.search import ScopeSnapshot

    outcome = executor.execute(ScopeSnapshot.empty("A_9_9"), "Thomas", SearchMode.EXACT, "name")

    assert outcome.records == ()
    assert "A_9_9" in outcome.error


def test_unknown_mode(executor, snapshot):
    with pytest.raises(ValueError):
        executor.execute(snapshot, "Thomas", "regex")
