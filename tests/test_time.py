import pytest

from tsforward.utils.time import parse_duration, timestamp_now


@pytest.mark.parametrize(
    "text,seconds",
    [
        ("60s", 60.0),
        ("1m30s", 90.0),
        ("2h", 7200.0),
        ("250ms", 0.25),
        ("1.5s", 1.5),
        ("100us", 1e-4),
        ("0", 0.0),
        ("-5s", -5.0),
    ],
)
def test_parse_duration(text, seconds):
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "10", "1d", "s", "1m 30s", "abc"])
def test_parse_duration_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_timestamp_now_is_whole_seconds():
    assert isinstance(timestamp_now(), int)
