import pytest

from zapcore.marshaler import (
    ArrayMarshaler,
    ArrayMarshalerFunc,
    ObjectMarshaler,
    ObjectMarshalerFunc,
)


class _RecordingEncoder:
    def __init__(self):
        self.fields = {}
        self.items = []

    def add_string(self, key, value):
        self.fields[key] = value

    def append_string(self, value):
        self.items.append(value)


def test_object_marshaler_func_calls_function():
    enc = _RecordingEncoder()
    marshaler = ObjectMarshalerFunc(lambda e: e.add_string("user", "alice"))
    marshaler.marshal_log_object(enc)
    assert enc.fields == {"user": "alice"}
    assert isinstance(marshaler, ObjectMarshaler)


def test_array_marshaler_func_calls_function():
    enc = _RecordingEncoder()

    def fill(e):
        for name in ("a", "b"):
            e.append_string(name)

    marshaler = ArrayMarshalerFunc(fill)
    marshaler.marshal_log_array(enc)
    assert enc.items == ["a", "b"]
    assert isinstance(marshaler, ArrayMarshaler)


def test_marshaler_func_propagates_errors():
    def fail(_):
        raise ValueError("too few users")

    with pytest.raises(ValueError, match="too few users"):
        ObjectMarshalerFunc(fail).marshal_log_object(_RecordingEncoder())
    with pytest.raises(ValueError, match="too few users"):
        ArrayMarshalerFunc(fail).marshal_log_array(_RecordingEncoder())


def test_marshaler_func_passes_same_encoder():
    seen = []
    enc = _RecordingEncoder()
    ObjectMarshalerFunc(seen.append).marshal_log_object(enc)
    ArrayMarshalerFunc(seen.append).marshal_log_array(enc)
    assert seen == [enc, enc]


def test_plain_function_needs_wrapping_to_be_a_marshaler():
    def fill_object(e):
        e.add_string("k", "v")

    def fill_array(e):
        e.append_string("v")

    assert not isinstance(fill_object, ObjectMarshaler)
    assert not isinstance(fill_array, ArrayMarshaler)

    enc = _RecordingEncoder()
    object_marshaler = ObjectMarshalerFunc(fill_object)
    array_marshaler = ArrayMarshalerFunc(fill_array)
    assert isinstance(object_marshaler, ObjectMarshaler)
    assert isinstance(array_marshaler, ArrayMarshaler)
    object_marshaler.marshal_log_object(enc)
    array_marshaler.marshal_log_array(enc)
    assert enc.fields == {"k": "v"}
    assert enc.items == ["v"]