import pytest

from rollsearch.models import VoterRecord
from rollsearch.search import FuzzyIndex

from conftest import COLUMNS, ROWS


@pytest.fixture
def voters():
    return [VoterRecord.from_row(COLUMNS, row) for row in ROWS["A_1_1"]]


def test_exact_name_ranks_first(voters):
    index = FuzzyIndex.build(voters)

    for voter in voters:
        results = index.search(voter.name)
        assert results[0].record is voter


def test_typo_still_finds_voter(voters):
    results = FuzzyIndex.build(voters).search("Meera Niar")

    assert results
    assert results[0].record.name == "Meera Nair"
    assert "Thomas" not in [m.record.name for m in results]


def test_name_outranks_guardian_name(voters):
    # LAKSHMI's guardian is RAMESH KUMAR; the voter named RAMESH KUMAR comes first
    results = FuzzyIndex.build(voters).search("ramesh kumar")

    assert [m.record.name for m in results[:2]] == ["RAMESH KUMAR", "LAKSHMI"]
    assert results[0].score < results[1].score


def test_search_by_epic(voters):
    results = FuzzyIndex.build(voters).search("abc1234567")

    assert results[0].record.epic_no == "ABC1234567"


def test_scores_are_ascending(voters):
    results = FuzzyIndex.build(voters).search("kumar")

    scores = [m.score for m in results]
    assert scores == sorted(scores)
    assert all(0 <= s <= 1 for s in scores)


def test_ties_keep_record_order():
    twins = [VoterRecord(sl_no=n, name="ANIL", epic_no=f"AAA000000{n}") for n in range(1, 5)]

    results = FuzzyIndex.build(twins).search("anil")

    assert [m.position for m in results] == [0, 1, 2, 3]
    assert [m.record["sl_no"] for m in results] == [1, 2, 3, 4]


def test_unrelated_query_matches_nothing(voters):
    assert FuzzyIndex.build(voters).search("qqqqzzzz") == []


@pytest.mark.parametrize("query", ["", "   ", "!!!", None])
def test_blank_query_matches_nothing(voters, query):
    assert FuzzyIndex.build(voters).search(query) == []


def test_match_far_into_field_is_dropped_by_distance():
    voter = VoterRecord(name="x" * 40 + "kumar")

    assert FuzzyIndex.build([voter], distance=100).search("kumar") == []
    assert len(FuzzyIndex.build([voter], distance=1000).search("kumar")) == 1


def test_zero_threshold_allows_only_leading_exact_matches(voters):
    index = FuzzyIndex.build(voters, threshold=0.0)

    assert [m.record.name for m in index.search("thomas")] == ["Thomas"]
    assert index.search("thomsa") == []


def test_only_weighted_fields_are_searched(voters):
    # sex_age is not an indexed field
    assert FuzzyIndex.build(voters).search("F/29") == []


def test_limit(voters):
    assert len(FuzzyIndex.build(voters).search("kumar", limit=1)) == 1


def test_weights_are_normalised():
    index = FuzzyIndex.build([], weights={"name": 2.0, "epic_no": 2.0})

    assert index.weights == {"name": 0.5, "epic_no": 0.5}
    assert len(index) == 0


def test_short_field_inside_query_is_not_a_hit():
    voters = [
        VoterRecord(name="RAMESH", fh_name="SURESH", house_name="Rose Villa"),
        VoterRecord(name="JOHN", fh_name="PAUL", house_name="A"),
        VoterRecord(name="MARY", fh_name="RAM", house_name="Green House"),
    ]

    results = FuzzyIndex.build(voters).search("ramesh")

    assert [m.record.name for m in results] == ["RAMESH"]


def test_field_slightly_shorter_than_query_still_matches():
    results = FuzzyIndex.build([VoterRecord(name="RAMES")]).search("ramesh")

    assert [m.record.name for m in results] == ["RAMES"]
    assert results[0].score < 0.3
