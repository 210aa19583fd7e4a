"""Typed key-value pairs that add themselves to an object encoder."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Callable, Iterable

from .error import encode_error


class FieldType(IntEnum):
    """Which member of a Field carries the value, and how to serialize it."""

    UNKNOWN = 0
    ARRAY_MARSHALER = 1
    OBJECT_MARSHALER = 2
    INLINE_MARSHALER = 3
    BINARY = 4
    BOOL = 5
    BYTE_STRING = 6
    COMPLEX128 = 7
    COMPLEX64 = 8
    DURATION = 9
    FLOAT64 = 10
    FLOAT32 = 11
    INT64 = 12
    INT32 = 13
    INT16 = 14
    INT8 = 15
    STRING = 16
    TIME = 17
    TIME_FULL = 18
    UINT64 = 19
    UINT32 = 20
    UINT16 = 21
    UINT8 = 22
    UINTPTR = 23
    REFLECT = 24
    NAMESPACE = 25
    STRINGER = 26
    ERROR = 27
    SKIP = 28


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def _to_float32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", float(value)))[0]


def _time_from_nanos(nanos: int, tz: Any) -> datetime:
    moment = _EPOCH + timedelta(microseconds=nanos // 1000)
    # Without an explicit zone the time is shown in local time.
    return moment.astimezone(tz) if tz is not None else moment.astimezone()


def _encode_stringer(key: str, value: Any, enc: Any) -> None:
    if value is None:
        enc.add_string(key, "<nil>")
        return
    try:
        text = str(value)
    except Exception as exc:
        raise RuntimeError(f"PANIC={exc}") from exc
    enc.add_string(key, text)


@dataclass(frozen=True)
class Field:
    """A marshaling operation that adds a key-value pair to a logging context.

    Integer types, booleans, durations (in nanoseconds) and TIME fields
    (nanoseconds since the epoch, with an optional tzinfo in ``interface``)
    keep their value in ``integer``; strings in ``string``; everything else
    in ``interface``.
    """

    key: str = ""
    type: FieldType = FieldType.UNKNOWN
    integer: int = 0
    string: str = ""
    interface: Any = None

    def add_to(self, enc: Any) -> None:
        """Add this field to an object encoder.

        Failures while marshaling are recorded under "<key>Error" instead of
        being raised. A field of unknown type raises ValueError.
        """
        adder = _ADDERS.get(self.type)
        if adder is None:
            raise ValueError(f"unknown field type: {self!r}")
        if self.type not in _FALLIBLE:
            adder(self, enc)
            return
        try:
            adder(self, enc)
        except Exception as exc:
            enc.add_string(f"{self.key}Error", str(exc))

    def equals(self, other: Field) -> bool:
        """Return whether two fields have the same type, key and value."""
        if self.type != other.type or self.key != other.key:
            return False
        if self.type in (FieldType.BINARY, FieldType.BYTE_STRING):
            return bytes(self.interface) == bytes(other.interface)
        if self.type in (
            FieldType.ARRAY_MARSHALER,
            FieldType.OBJECT_MARSHALER,
            FieldType.ERROR,
            FieldType.REFLECT,
        ):
            return self.interface == other.interface
        return self == other


_FALLIBLE = frozenset(
    {
        FieldType.ARRAY_MARSHALER,
        FieldType.OBJECT_MARSHALER,
        FieldType.INLINE_MARSHALER,
        FieldType.REFLECT,
        FieldType.STRINGER,
        FieldType.ERROR,
    }
)

_ADDERS: dict[FieldType, Callable[[Field, Any], None]] = {
    FieldType.ARRAY_MARSHALER: lambda f, enc: enc.add_array(f.key, f.interface),
    FieldType.OBJECT_MARSHALER: lambda f, enc: enc.add_object(f.key, f.interface),
    FieldType.INLINE_MARSHALER: lambda f, enc: f.interface.marshal_log_object(enc),
    FieldType.BINARY: lambda f, enc: enc.add_binary(f.key, bytes(f.interface)),
    FieldType.BOOL: lambda f, enc: enc.add_bool(f.key, f.integer == 1),
    FieldType.BYTE_STRING: lambda f, enc: enc.add_byte_string(f.key, bytes(f.interface)),
    FieldType.COMPLEX128: lambda f, enc: enc.add_complex(f.key, complex(f.interface)),
    FieldType.COMPLEX64: lambda f, enc: enc.add_complex64(f.key, complex(f.interface)),
    FieldType.DURATION: lambda f, enc: enc.add_duration(f.key, _signed(f.integer, 64)),
    FieldType.FLOAT64: lambda f, enc: enc.add_float(f.key, float(f.interface)),
    FieldType.FLOAT32: lambda f, enc: enc.add_float32(f.key, _to_float32(f.interface)),
    FieldType.INT64: lambda f, enc: enc.add_int(f.key, _signed(f.integer, 64)),
    FieldType.INT32: lambda f, enc: enc.add_int(f.key, _signed(f.integer, 32)),
    FieldType.INT16: lambda f, enc: enc.add_int(f.key, _signed(f.integer, 16)),
    FieldType.INT8: lambda f, enc: enc.add_int(f.key, _signed(f.integer, 8)),
    FieldType.STRING: lambda f, enc: enc.add_string(f.key, f.string),
    FieldType.TIME: lambda f, enc: enc.add_time(f.key, _time_from_nanos(f.integer, f.interface)),
    FieldType.TIME_FULL: lambda f, enc: enc.add_time(f.key, f.interface),
    FieldType.UINT64: lambda f, enc: enc.add_int(f.key, _unsigned(f.integer, 64)),
    FieldType.UINT32: lambda f, enc: enc.add_int(f.key, _unsigned(f.integer, 32)),
    FieldType.UINT16: lambda f, enc: enc.add_int(f.key, _unsigned(f.integer, 16)),
    FieldType.UINT8: lambda f, enc: enc.add_int(f.key, _unsigned(f.integer, 8)),
    FieldType.UINTPTR: lambda f, enc: enc.add_int(f.key, _unsigned(f.integer, 64)),
    FieldType.REFLECT: lambda f, enc: enc.add_reflected(f.key, f.interface),
    FieldType.NAMESPACE: lambda f, enc: enc.open_namespace(f.key),
    FieldType.STRINGER: lambda f, enc: _encode_stringer(f.key, f.interface, enc),
    FieldType.ERROR: lambda f, enc: encode_error(f.key, f.interface, enc),
    FieldType.SKIP: lambda f, enc: None,
}


def add_fields(enc: Any, fields: Iterable[Field]) -> None:
    """Add every field to enc, in order."""
    for f in fields:
        f.add_to(enc)