"""
keep_alive parsing tests.
"""
from datetime import timedelta

import pytest

from honeypot.services.keep_alive import (
    DEFAULT_KEEP_ALIVE,
    FOREVER,
    KeepAliveError,
    parse_keep_alive,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, DEFAULT_KEEP_ALIVE),
        (0, timedelta(0)),
        (30, timedelta(seconds=30)),
        (2.5, timedelta(seconds=2.5)),
        ("300", timedelta(seconds=300)),
        ("0", timedelta(0)),
        ("10s", timedelta(seconds=10)),
        ("5m", timedelta(minutes=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
    ],
)
def test_valid_values(value, expected):
    assert parse_keep_alive(value) == expected


@pytest.mark.parametrize("value", [-1, "-1", "-5m"])
def test_negative_means_forever(value):
    assert parse_keep_alive(value) == FOREVER


@pytest.mark.parametrize("value", ["", "abc", "5 minutes", "10x", "m"])
def test_invalid_strings(value):
    with pytest.raises(KeepAliveError) as exc_info:
        parse_keep_alive(value)
    assert str(exc_info.value) == f'time: invalid duration "{value}"'
