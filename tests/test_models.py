import pytest

from rollsearch.exceptions import ValidationError
from rollsearch.models import FilterSelection, PrecinctId, VoterRecord


def test_precinct_parse():
    precinct = PrecinctId.parse("G02053_022_001")

    assert precinct.as_tuple() == ("G02053", "022", "001")
    assert str(precinct) == "G02053_022_001"


def test_precinct_rejects_non_alphanumeric_parts():
    with pytest.raises(ValidationError) as exc:
        PrecinctId("G02053", "0-22", "001")
    assert exc.value.details["field_name"] == "ward"


def test_selection_scope_id():
    assert FilterSelection("G02053", "022", "001").scope_id == "G02053_022_001"


def test_voter_record_is_a_read_only_mapping():
    voter = VoterRecord.from_row(
        ["epic_no", "name", "house_no", "house_name", "sex_age", "extra"],
        ["ABC1234567", "RAMESH", "12", "Rose Villa", "M 42", 7],
    )

    assert voter["name"] == "RAMESH"
    assert voter.get("fh_name") is None
    assert voter.fh_name is None
    assert voter["extra"] == 7
    assert len(voter) == 6
    assert voter == {
        "epic_no": "ABC1234567",
        "name": "RAMESH",
        "house_no": "12",
        "house_name": "Rose Villa",
        "sex_age": "M 42",
        "extra": 7,
    }
    with pytest.raises(TypeError):
        voter["name"] = "other"


@pytest.mark.parametrize(
    "sex_age, sex, age",
    [
        ("M 42", "M", 42),
        ("F/35", "F", 35),
        ("Female 29", "F", 29),
        ("", None, None),
        (None, None, None),
        ("unknown", None, None),
    ],
)
def test_sex_and_age_parsing(sex_age, sex, age):
    voter = VoterRecord(sex_age=sex_age)

    assert voter.sex == sex
    assert voter.age == age


def test_address_joins_available_parts():
    assert VoterRecord(house_no="12", house_name="Rose Villa").address == "12, Rose Villa"
    assert VoterRecord(house_no=None, house_name="Rose Villa").address == "Rose Villa"
    assert VoterRecord().address == ""


def test_to_dict_is_a_copy():
    voter = VoterRecord(name="RAMESH")
    data = voter.to_dict()
    data["name"] = "changed"

    assert voter.name == "RAMESH"
