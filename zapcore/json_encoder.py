"""A JSON encoder for log entries that escapes every key and value."""

from __future__ import annotations

import base64
import dataclasses
import json
import math
import re
import struct
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable

from .encoder import (
    DEFAULT_LINE_ENDING,
    EncoderConfig,
    _duration_nanos,
    _unix_nanos,
    format_time_layout,
    full_name_encoder,
)
from .entry import Entry
from .field import Field, add_fields

_NO_SEPARATOR_AFTER = frozenset("{[:, ")

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_NEEDS_ESCAPE = re.compile(r'[\x00-\x1f"\\\ud800-\udfff]')


def _escape_char(match: re.Match[str]) -> str:
    char = match.group()
    mapped = _ESCAPES.get(char)
    if mapped is not None:
        return mapped
    code = ord(char)
    if code >= 0xD800:
        # Invalid UTF-8 input (or a lone surrogate) becomes the replacement rune.
        return "\\ufffd"
    return f"\\u00{code:02x}"


def _escape(text: str) -> str:
    return _NEEDS_ESCAPE.sub(_escape_char, text)


def _escape_bytes(data: bytes | bytearray | str) -> str:
    if isinstance(data, str):
        return _escape(data)
    # surrogateescape maps each invalid byte to its own surrogate, which is
    # then rendered as one replacement rune per byte.
    return _escape(bytes(data).decode("utf-8", errors="surrogateescape"))


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _shortest(value: float, bits: int) -> str:
    if bits == 32:
        value = _to_float32(value)
        text = repr(value)
        for precision in range(1, 10):
            candidate = f"{value:.{precision}g}"
            if _to_float32(float(candidate)) == value:
                text = candidate
                break
    else:
        text = repr(value)
    fixed = format(Decimal(text), "f")
    if "." in fixed:
        fixed = fixed.rstrip("0").rstrip(".")
    return fixed


def _format_float(value: float, bits: int) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return _shortest(value, bits)


def _reflect_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise TypeError(f"json: unsupported type: {type(obj).__name__}")


def _encode_reflected(value: Any) -> str:
    return json.dumps(
        value,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
        default=_reflect_default,
    )


class JSONEncoder:
    """Encodes log context and entries as single-line JSON objects.

    Keys are not deduplicated, so the same key may appear more than once.
    """

    def __init__(self, config: EncoderConfig | None = None, *, spaced: bool = False) -> None:
        self.config = dataclasses.replace(config) if config is not None else EncoderConfig()
        self.spaced = spaced
        self._open_namespaces = 0
        self._parts: list[str] = []
        self._size = 0
        self._last = ""

    # Buffer handling

    def _write(self, text: str) -> None:
        if text:
            self._parts.append(text)
            self._size += len(text)
            self._last = text[-1]

    def _contents(self) -> str:
        return "".join(self._parts)

    def _add_element_separator(self) -> None:
        if self._size == 0 or self._last in _NO_SEPARATOR_AFTER:
            return
        self._write(", " if self.spaced else ",")

    def _add_key(self, key: str) -> None:
        self._add_element_separator()
        self._write(f'"{_escape(key)}":')
        if self.spaced:
            self._write(" ")

    def _fresh(self) -> JSONEncoder:
        other = JSONEncoder.__new__(type(self))
        other.config = self.config
        other.spaced = self.spaced
        other._open_namespaces = self._open_namespaces
        other._parts = []
        other._size = 0
        other._last = ""
        return other

    # Object encoder

    def add_array(self, key: str, marshaler: Any) -> None:
        self._add_key(key)
        self.append_array(marshaler)

    def add_object(self, key: str, marshaler: Any) -> None:
        self._add_key(key)
        self.append_object(marshaler)

    def add_binary(self, key: str, value: bytes) -> None:
        """Add bytes as a base64 string."""
        self.add_string(key, base64.b64encode(bytes(value)).decode("ascii"))

    def add_byte_string(self, key: str, value: bytes) -> None:
        self._add_key(key)
        self.append_byte_string(value)

    def add_bool(self, key: str, value: bool) -> None:
        self._add_key(key)
        self.append_bool(value)

    def add_complex(self, key: str, value: complex) -> None:
        self._add_key(key)
        self.append_complex(value)

    def add_complex64(self, key: str, value: complex) -> None:
        self._add_key(key)
        self.append_complex64(value)

    def add_duration(self, key: str, value: Any) -> None:
        self._add_key(key)
        self.append_duration(value)

    def add_float(self, key: str, value: float) -> None:
        self._add_key(key)
        self.append_float(value)

    def add_float32(self, key: str, value: float) -> None:
        self._add_key(key)
        self.append_float32(value)

    def add_int(self, key: str, value: int) -> None:
        self._add_key(key)
        self.append_int(value)

    def add_string(self, key: str, value: str) -> None:
        self._add_key(key)
        self.append_string(value)

    def add_time(self, key: str, value: datetime | None) -> None:
        self._add_key(key)
        self.append_time(value)

    def add_reflected(self, key: str, value: Any) -> None:
        """Add any JSON-serializable value; raises if it cannot be serialized."""
        encoded = _encode_reflected(value)
        self._add_key(key)
        self._write(encoded)

    def open_namespace(self, key: str) -> None:
        """Nest all later fields in an object under key."""
        self._add_key(key)
        self._write("{")
        self._open_namespaces += 1

    # Array encoder

    def append_array(self, marshaler: Any) -> None:
        self._add_element_separator()
        self._write("[")
        try:
            marshaler.marshal_log_array(self)
        finally:
            self._write("]")

    def append_object(self, marshaler: Any) -> None:
        self._add_element_separator()
        self._write("{")
        try:
            marshaler.marshal_log_object(self)
        finally:
            self._write("}")

    def append_reflected(self, value: Any) -> None:
        encoded = _encode_reflected(value)
        self._add_element_separator()
        self._write(encoded)

    def append_bool(self, value: bool) -> None:
        self._add_element_separator()
        self._write("true" if value else "false")

    def append_byte_string(self, value: bytes) -> None:
        self._add_element_separator()
        self._write(f'"{_escape_bytes(value)}"')

    def append_complex(self, value: complex) -> None:
        value = complex(value)
        self._add_element_separator()
        real = _format_float(value.real, 64)
        imag = _format_float(value.imag, 64)
        self._write(f'"{real}+{imag}i"')

    def append_complex64(self, value: complex) -> None:
        value = complex(value)
        self.append_complex(complex(_to_float32(value.real), _to_float32(value.imag)))

    def append_duration(self, value: Any) -> None:
        before = self._size
        if self.config.encode_duration is not None:
            self.config.encode_duration(value, self)
        if before == self._size:
            # A no-op duration encoder falls back to nanoseconds to keep JSON valid.
            self.append_int(_duration_nanos(value))

    def _append_float(self, value: float, bits: int) -> None:
        self._add_element_separator()
        value = float(value)
        if bits == 32:
            value = _to_float32(value)
        if math.isnan(value):
            self._write('"NaN"')
        elif math.isinf(value):
            self._write('"+Inf"' if value > 0 else '"-Inf"')
        else:
            self._write(_shortest(value, bits))

    def append_float(self, value: float) -> None:
        self._append_float(value, 64)

    def append_float32(self, value: float) -> None:
        self._append_float(value, 32)

    def append_int(self, value: int) -> None:
        self._add_element_separator()
        self._write(str(int(value)))

    def append_string(self, value: str) -> None:
        self._add_element_separator()
        self._write(f'"{_escape(value)}"')

    def append_time(self, value: datetime | None) -> None:
        if value is None:
            self._add_element_separator()
            self._write("null")
            return
        before = self._size
        if self.config.encode_time is not None:
            self.config.encode_time(value, self)
        if before == self._size:
            # A no-op time encoder falls back to nanoseconds since the epoch.
            self.append_int(_unix_nanos(value))

    def append_time_layout(self, value: datetime, layout: str) -> None:
        self._add_element_separator()
        self._write(f'"{format_time_layout(value, layout)}"')

    # Encoder

    def clone(self) -> JSONEncoder:
        """Copy the encoder so that fields added to the copy leave this one alone."""
        other = self._fresh()
        other._write(self._contents())
        return other

    def encode_entry(self, ent: Entry, fields: Iterable[Field] | None = None) -> str:
        """Encode an entry, its fields and the accumulated context as one line."""
        cfg = self.config
        final = self._fresh()
        final._write("{")

        if cfg.level_key:
            final._add_key(cfg.level_key)
            before = final._size
            if cfg.encode_level is not None:
                cfg.encode_level(ent.level, final)
            if before == final._size:
                final.append_string(str(ent.level))
        if cfg.time_key:
            final.add_time(cfg.time_key, ent.time)
        if ent.logger_name and cfg.name_key:
            final._add_key(cfg.name_key)
            before = final._size
            name_encoder = cfg.encode_name or full_name_encoder
            name_encoder(ent.logger_name, final)
            if before == final._size:
                final.append_string(ent.logger_name)
        if ent.caller.defined:
            if cfg.caller_key:
                final._add_key(cfg.caller_key)
                before = final._size
                if cfg.encode_caller is not None:
                    cfg.encode_caller(ent.caller, final)
                if before == final._size:
                    final.append_string(str(ent.caller))
            if cfg.function_key:
                final._add_key(cfg.function_key)
                final.append_string(ent.caller.function)
        if cfg.message_key:
            final._add_key(cfg.message_key)
            final.append_string(ent.message)
        if self._size > 0:
            final._add_element_separator()
            final._write(self._contents())
        add_fields(final, fields or ())
        final._write("}" * final._open_namespaces)
        if ent.stack and cfg.stacktrace_key:
            final.add_string(cfg.stacktrace_key, ent.stack)
        final._write("}")
        final._write(cfg.line_ending or DEFAULT_LINE_ENDING)
        return final._contents()