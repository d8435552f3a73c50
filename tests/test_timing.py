import logging

import pytest

from rollsearch.utils import format_duration, timed_operation


def test_timed_operation_records_duration(caplog):
    logger = logging.getLogger("rollsearch.test.timed")

    with caplog.at_level(logging.DEBUG, logger="rollsearch.test.timed"):
        with timed_operation("Build index", logger) as timing:
            sum(range(1000))

    assert timing.success
    assert timing.duration_sec >= 0
    assert caplog.records[0].getMessage().startswith("Build index: ")


def test_timed_operation_records_failure():
    with pytest.raises(RuntimeError):
        with timed_operation("Load") as timing:
            raise RuntimeError("disk gone")

    assert not timing.success
    assert timing.error == "disk gone"


@pytest.mark.parametrize(
    "seconds, expected",
    [(0.0005, "500µs"), (0.25, "250.0ms"), (2.5, "2.50s"), (125, "2m 5.0s")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
