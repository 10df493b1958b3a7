import pytest
import yaml

from lingua.lingua_serialize import serialize, deserialize, detect_format, to_builtin
from lingua.lingua_datatypes import (
    Obj, ClassObj, NumberObj, StringObj, BooleanObj, ListObj, NULL, NUMBER_CLASS,
)


def test_json_document_sniffed_from_leading_bracket():
    out = deserialize('[{"node": "number", "value": 1}]')
    assert out == [{"node": "number", "value": 1}]


def test_yaml_document_with_explicit_format():
    out = deserialize("- node: name\n  name: x\n", fmt="yaml")
    assert out == [{"node": "name", "name": "x"}]


def test_deserialize_bytes():
    assert deserialize("a: 1\n".encode("utf-8"), fmt="yaml") == {"a": 1}


@pytest.mark.parametrize("path, data, expected", [
    ("prog.json", None, "json"),
    ("PROG.YAML", None, "yaml"),
    ("prog.yml", None, "yaml"),
    (None, '  {"a": 1}', "json"),
    (None, "a: 1", "yaml"),
    ("prog.txt", "[1]", "json"),
    (None, None, None),
])
def test_detect_format(path, data, expected):
    assert detect_format(path, data) == expected


def test_path_hint_wins_over_sniffing():
    assert deserialize("[1, 2]", path_hint="prog.yaml") == [1, 2]


@pytest.mark.parametrize("text, fmt, fragment", [
    ("{not json", "json", "invalid JSON document"),
    ("a: [1", "yaml", "invalid YAML document"),
    ("a: 1", "toml", "Unsupported document format"),
])
def test_deserialize_errors_are_value_errors(text, fmt, fragment):
    with pytest.raises(ValueError) as excinfo:
        deserialize(text, fmt=fmt)
    assert fragment in str(excinfo.value)


@pytest.mark.parametrize("value, expected", [
    (NULL, None),
    (BooleanObj.TRUE, True),
    (NumberObj(3), 3),
    (NumberObj(2.5), 2.5),
    (StringObj("hi"), "hi"),
    (ListObj([NumberObj(1), ListObj([StringObj("x")])]), [1, ["x"]]),
    (NUMBER_CLASS, "<class Number>"),
    (Obj(ClassObj("Thing")), "<Thing instance>"),
    ((NumberObj(1), NULL), [1, None]),
    ("plain", "plain"),
])
def test_to_builtin(value, expected):
    assert to_builtin(value) == expected


def test_integral_numbers_serialize_without_fraction():
    value = ListObj([NumberObj(1), NumberObj(1.5), StringObj("ü")])
    assert serialize(value, fmt="json", pretty=False) == '[1, 1.5, "ü"]'


def test_yaml_serialization_loads_back():
    value = ListObj([StringObj("a"), BooleanObj.FALSE, NULL])
    assert yaml.safe_load(serialize(value, fmt="yaml")) == ["a", False, None]


def test_serialize_unknown_format():
    with pytest.raises(ValueError):
        serialize(NULL, fmt="xml")
