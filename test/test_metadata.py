import json

import numpy as np
import pytest

from hdf5ct.core import (
    AttributeRecord,
    ConversionError,
    render_attributes_json,
    stringify_attribute_value,
)


def test_attribute_record_to_dict():
    r = AttributeRecord(name="units", value="rpm", type_tag="STRING")
    assert r.to_dict() == {"name": "units", "value": "rpm", "type": "STRING"}


def test_attribute_record_defaults_to_unknown():
    assert AttributeRecord(name="x", value="1").type_tag == "UNKNOWN"


def test_attribute_record_rejects_bad_tag():
    with pytest.raises(ConversionError):
        AttributeRecord(name="x", value="1", type_tag="NUMBER")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("hello", "hello"),
        (b"bytes", "bytes"),
        (np.bytes_(b"np"), "np"),
        (3, "3"),
        (np.int32(4), "4"),
        (np.float64(1.5), "1.5"),
        (np.array([1, 2, 3]), "1,2,3"),
        (np.array([[1, 2], [3, 4]]), "1,2,3,4"),
        (np.array(7), "7"),
        (np.array([b"a", b"b"]), "a,b"),
        ([1.5, 2.5], "1.5,2.5"),
    ],
)
def test_stringify_attribute_value(value, expected):
    assert stringify_attribute_value(value) == expected


def test_render_attributes_json_round_trips():
    records = [
        AttributeRecord("a", "1", "INTEGER"),
        AttributeRecord("b", "x,y", "STRING"),
    ]
    text = render_attributes_json(records)

    assert text == '[{"name":"a","value":"1","type":"INTEGER"},{"name":"b","value":"x,y","type":"STRING"}]'
    assert json.loads(text)[1]["value"] == "x,y"


def test_render_empty():
    assert render_attributes_json([]) == "[]"
