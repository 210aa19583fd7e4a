"""Encoders backed by plain dicts and lists, handy in tests."""

from __future__ import annotations

from typing import Any


class MapObjectEncoder:
    """An object encoder that stores everything in a dict.

    Not fast enough for production use, but helpful in tests.
    """

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self._cur = self.fields

    def add_array(self, key: str, marshaler: Any) -> None:
        """Add an array built by marshaler; partial results are kept on failure."""
        arr = SliceArrayEncoder()
        try:
            marshaler.marshal_log_array(arr)
        finally:
            self._cur[key] = arr.elems

    def add_object(self, key: str, marshaler: Any) -> None:
        """Add a nested object built by marshaler; partial results are kept on failure."""
        nested = MapObjectEncoder()
        self._cur[key] = nested.fields
        marshaler.marshal_log_object(nested)

    def add_binary(self, key: str, value: bytes) -> None:
        self._cur[key] = bytes(value)

    def add_byte_string(self, key: str, value: bytes) -> None:
        self._cur[key] = bytes(value).decode("utf-8", errors="replace")

    def add_bool(self, key: str, value: bool) -> None:
        self._cur[key] = bool(value)

    def add_complex(self, key: str, value: complex) -> None:
        self._cur[key] = complex(value)

    def add_complex64(self, key: str, value: complex) -> None:
        self._cur[key] = complex(value)

    def add_duration(self, key: str, value: Any) -> None:
        self._cur[key] = value

    def add_float(self, key: str, value: float) -> None:
        self._cur[key] = float(value)

    def add_float32(self, key: str, value: float) -> None:
        self._cur[key] = float(value)

    def add_int(self, key: str, value: int) -> None:
        self._cur[key] = int(value)

    def add_string(self, key: str, value: str) -> None:
        self._cur[key] = value

    def add_time(self, key: str, value: Any) -> None:
        self._cur[key] = value

    def add_reflected(self, key: str, value: Any) -> None:
        self._cur[key] = value

    def open_namespace(self, key: str) -> None:
        """Make all later fields go into a new nested dict under key."""
        ns: dict[str, Any] = {}
        self._cur[key] = ns
        self._cur = ns


class SliceArrayEncoder:
    """An array encoder that stores everything in a list."""

    def __init__(self) -> None:
        self.elems: list[Any] = []

    def append_array(self, marshaler: Any) -> None:
        inner = SliceArrayEncoder()
        try:
            marshaler.marshal_log_array(inner)
        finally:
            self.elems.append(inner.elems)

    def append_object(self, marshaler: Any) -> None:
        obj = MapObjectEncoder()
        try:
            marshaler.marshal_log_object(obj)
        finally:
            self.elems.append(obj.fields)

    def append_reflected(self, value: Any) -> None:
        self.elems.append(value)

    def append_bool(self, value: bool) -> None:
        self.elems.append(bool(value))

    def append_byte_string(self, value: bytes) -> None:
        self.elems.append(bytes(value).decode("utf-8", errors="replace"))

    def append_complex(self, value: complex) -> None:
        self.elems.append(complex(value))

    def append_complex64(self, value: complex) -> None:
        self.elems.append(complex(value))

    def append_duration(self, value: Any) -> None:
        self.elems.append(value)

    def append_float(self, value: float) -> None:
        self.elems.append(float(value))

    def append_float32(self, value: float) -> None:
        self.elems.append(float(value))

    def append_int(self, value: int) -> None:
        self.elems.append(int(value))

    def append_string(self, value: str) -> None:
        self.elems.append(value)

    def append_time(self, value: Any) -> None:
        self.elems.append(value)