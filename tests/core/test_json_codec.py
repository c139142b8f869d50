"""JSON Codec — compact encoding, strict NaN handling, SerializationError mapping."""

import math
from decimal import Decimal

import pytest

from phial.core.errors import SerializationError
from phial.core.json_codec import decode_json, encode_json


def test_encode_is_compact_and_keeps_unicode():
    assert encode_json({"author": "José", "n": [1, 2]}) == '{"author":"José","n":[1,2]}'


@pytest.mark.parametrize("value", [math.nan, math.inf, object(), Decimal("1.5"), {1, 2}])
def test_encode_rejects_values_json_cannot_represent(value):
    with pytest.raises(SerializationError) as exc_info:
        encode_json({"v": value})
    assert exc_info.value.code == "SERIALIZATION_ERROR"
    assert exc_info.value.__cause__ is not None


def test_decode_round_trips_and_handles_empty_input():
    assert decode_json('{"a":1}') == {"a": 1}
    assert decode_json(b"[1,2]") == [1, 2]
    assert decode_json(b"") is None


def test_decode_rejects_malformed_json():
    with pytest.raises(SerializationError):
        decode_json("{not json")
