"""Tests for simplecrud.codecs: encode/decode of each codec."""

import datetime

import pytest

from simplecrud.codecs import (
    BOOLEAN,
    DATE,
    DATETIME,
    FLOAT,
    INTEGER,
    JSON,
    RAW,
    SET,
)


@pytest.mark.parametrize(
    "codec, value",
    [
        (RAW, "anything"),
        (INTEGER, 42),
        (FLOAT, 1.5),
        (BOOLEAN, True),
        (BOOLEAN, False),
        (DATETIME, datetime.datetime(2024, 5, 17, 13, 45, 12)),
        (DATE, datetime.date(2024, 5, 17)),
        (JSON, {"tags": ["a", "b"], "n": 1}),
        (SET, {"red", "green"}),
    ],
)
def test_decode_encode_round_trip(codec, value):
    assert codec.decode(codec.encode(value)) == value


@pytest.mark.parametrize("codec", [RAW, INTEGER, FLOAT, BOOLEAN, DATETIME, DATE, JSON, SET])
def test_none_maps_to_none(codec):
    assert codec.encode(None) is None
    assert codec.decode(None) is None


def test_integer_parses_strings():
    assert INTEGER.decode("12") == 12
    assert INTEGER.encode("") is None


def test_integer_rejects_garbage():
    with pytest.raises(ValueError):
        INTEGER.encode("twelve")


def test_boolean_is_stored_as_int():
    assert BOOLEAN.encode(True) == 1
    assert BOOLEAN.encode(False) == 0
    assert BOOLEAN.decode(1) is True
    assert BOOLEAN.decode(0) is False
    assert BOOLEAN.decode("1") is True


def test_datetime_format_and_truncation():
    value = datetime.datetime(2024, 5, 17, 13, 45, 12, 987654)
    assert DATETIME.encode(value) == "2024-05-17 13:45:12"
    assert DATETIME.decode(DATETIME.encode(value)) == value.replace(microsecond=0)


def test_datetime_parses_database_strings():
    assert DATETIME.decode("2024-01-01 10:00:00") == datetime.datetime(2024, 1, 1, 10, 0)
    assert DATETIME.decode("0000-00-00 00:00:00") is None
    assert DATETIME.decode("") is None


def test_date_accepts_datetime():
    assert DATE.decode(datetime.datetime(2024, 1, 1, 10, 0)) == datetime.date(2024, 1, 1)
    assert DATE.encode(datetime.date(2024, 1, 2)) == "2024-01-02"


def test_json_keeps_already_decoded_values():
    assert JSON.decode({"a": 1}) == {"a": 1}
    assert JSON.encode(["é"]) == '["é"]'


def test_set_is_comma_separated():
    assert SET.encode({"b", "a"}) == "a,b"
    assert SET.decode("") == set()
    assert SET.decode("x,y") == {"x", "y"}
