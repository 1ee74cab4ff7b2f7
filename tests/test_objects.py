from unittest import mock

import pytest

from utf8_normalizer import objects
from utf8_normalizer.bytetext import ByteText
from utf8_normalizer.errors import UTF8CoercionError
from utf8_normalizer.objects import ensure_utf8_dict, ensure_utf8_list, ensure_utf8_object


def test_object_dispatches_lists():
    values = []
    with mock.patch.object(objects, "ensure_utf8_list", return_value=values) as walk:
        assert ensure_utf8_object(values) is values
    walk.assert_called_once_with(values)


def test_list_visits_each_element_once_in_order():
    element1 = b"hello"
    element2 = 42
    values = [element1, element2]

    with mock.patch.object(objects, "ensure_utf8_object", side_effect=lambda v: v) as visit:
        assert ensure_utf8_list(values) is values

    assert visit.call_args_list == [mock.call(element1), mock.call(element2)]


def test_object_dispatches_dicts():
    mapping = {}
    with mock.patch.object(objects, "ensure_utf8_dict", return_value=mapping) as walk:
        assert ensure_utf8_object(mapping) is mapping
    walk.assert_called_once_with(mapping)


def test_dict_visits_values_only():
    key = b"hello"
    value = 42
    mapping = {key: value}

    with mock.patch.object(objects, "ensure_utf8_object", side_effect=lambda v: v) as visit:
        assert ensure_utf8_dict(mapping) is mapping

    visit.assert_called_once_with(value)


def test_object_dispatches_text():
    text = ByteText(b"")
    with mock.patch.object(objects, "ensure_utf8_inplace", return_value=text) as leaf:
        assert ensure_utf8_object(text) is text
    leaf.assert_called_once_with(text)


@pytest.mark.parametrize("value", [None, 42, 1.5, True, (b"\x90",)])
def test_other_values_pass_through(value):
    assert ensure_utf8_object(value) is value


def test_nested_structure_is_normalized_in_place():
    key = b"caf\xe9"
    buffer = bytearray(b"dash \x96 dash")
    data = {key: [b"caf\xe9", {"n": 1, "s": buffer}]}

    result = ensure_utf8_object(data)

    assert result is data
    assert list(data) == [key]
    assert next(iter(data)) is key
    assert data[key][0] == "café".encode("utf-8")
    assert data[key][1]["s"] is buffer
    assert buffer == "dash – dash".encode("utf-8")


def test_one_bad_leaf_fails_the_whole_walk():
    data = [b"fine", b"rubbish \x90 rubbish"]
    with pytest.raises(UTF8CoercionError):
        ensure_utf8_object(data)
