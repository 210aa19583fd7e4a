"""Encoders for levels, times, durations, callers and names, and their configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

from .entry import EntryCaller
from .level import Level, capital_color_string, lowercase_color_string

DEFAULT_LINE_ENDING = "\n"
OMIT_KEY = ""

LevelEncoder = Callable[[Level, Any], None]
TimeEncoder = Callable[[datetime, Any], None]
DurationEncoder = Callable[[Any], None]
CallerEncoder = Callable[[EntryCaller, Any], None]
NameEncoder = Callable[[str, Any], None]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_SECOND = 10**9
_NANOS_PER_MILLI = 10**6


def _text(text: str | bytes) -> str:
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8", errors="replace")
    if not isinstance(text, str):
        raise TypeError(f"expected text, got {type(text).__name__}")
    return text


# Levels


def lowercase_level_encoder(level: int, enc: Any) -> None:
    """Append the level as a lowercase string, e.g. "info"."""
    enc.append_string(str(Level(level)))


def lowercase_color_level_encoder(level: int, enc: Any) -> None:
    """Append the level as a colored lowercase string."""
    enc.append_string(lowercase_color_string(level))


def capital_level_encoder(level: int, enc: Any) -> None:
    """Append the level as an all-caps string, e.g. "INFO"."""
    enc.append_string(Level(level).capital_string())


def capital_color_level_encoder(level: int, enc: Any) -> None:
    """Append the level as a colored all-caps string."""
    enc.append_string(capital_color_string(level))


def level_encoder_from_text(text: str | bytes) -> LevelEncoder:
    """Choose a level encoder by name; unknown names give the lowercase one."""
    return {
        "capital": capital_level_encoder,
        "capitalColor": capital_color_level_encoder,
        "color": lowercase_color_level_encoder,
    }.get(_text(text), lowercase_level_encoder)


# Times


def _as_aware(t: datetime) -> datetime:
    # A naive datetime is taken to be local time.
    return t if t.tzinfo is not None else t.astimezone()


def _unix_nanos(t: datetime) -> int:
    delta = _as_aware(t) - _EPOCH
    return (delta.days * 86400 + delta.seconds) * _NANOS_PER_SECOND + delta.microseconds * 1000


def epoch_time_encoder(t: datetime, enc: Any) -> None:
    """Append floating-point seconds since the Unix epoch."""
    enc.append_float(_unix_nanos(t) / 1e9)


def epoch_millis_time_encoder(t: datetime, enc: Any) -> None:
    """Append floating-point milliseconds since the Unix epoch."""
    enc.append_float(_unix_nanos(t) / 1e6)


def epoch_nanos_time_encoder(t: datetime, enc: Any) -> None:
    """Append integer nanoseconds since the Unix epoch."""
    enc.append_int(_unix_nanos(t))


_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_LAYOUT_CHUNK = re.compile(
    r"January|Jan|Monday|Mon|MST"
    r"|Z070000|Z07:00:00|Z0700|Z07:00|Z07"
    r"|-070000|-07:00:00|-0700|-07:00|-07"
    r"|2006|002|__2|_2(?!006)|01|02|03|04|05|06|15|PM|pm"
    r"|[.,](?:0+|9+)(?![0-9])"
    r"|1|2|3|4|5"
)


def _hour12(t: datetime) -> int:
    return t.hour % 12 or 12


def _yday(t: datetime) -> int:
    return t.timetuple().tm_yday


_SIMPLE_CHUNKS: dict[str, Callable[[datetime], str]] = {
    "January": lambda t: _MONTHS[t.month - 1],
    "Jan": lambda t: _MONTHS[t.month - 1][:3],
    "Monday": lambda t: _WEEKDAYS[t.weekday()],
    "Mon": lambda t: _WEEKDAYS[t.weekday()][:3],
    "2006": lambda t: f"{t.year:04d}",
    "06": lambda t: f"{t.year % 100:02d}",
    "01": lambda t: f"{t.month:02d}",
    "1": lambda t: str(t.month),
    "02": lambda t: f"{t.day:02d}",
    "2": lambda t: str(t.day),
    "_2": lambda t: f"{t.day:2d}",
    "002": lambda t: f"{_yday(t):03d}",
    "__2": lambda t: f"{_yday(t):3d}",
    "15": lambda t: f"{t.hour:02d}",
    "3": lambda t: str(_hour12(t)),
    "03": lambda t: f"{_hour12(t):02d}",
    "4": lambda t: str(t.minute),
    "04": lambda t: f"{t.minute:02d}",
    "5": lambda t: str(t.second),
    "05": lambda t: f"{t.second:02d}",
    "PM": lambda t: "PM" if t.hour >= 12 else "AM",
    "pm": lambda t: "pm" if t.hour >= 12 else "am",
}


def _offset_seconds(t: datetime) -> int:
    offset = t.utcoffset()
    return int(offset.total_seconds()) if offset is not None else 0


def _format_zone(chunk: str, t: datetime) -> str:
    secs = _offset_seconds(t)
    if chunk.startswith("Z") and secs == 0:
        return "Z"
    sign = "-" if secs < 0 else "+"
    z = abs(secs)
    hh, mm, ss = z // 3600, (z // 60) % 60, z % 60
    shape = chunk[1:]
    if shape == "07":
        return f"{sign}{hh:02d}"
    if shape == "0700":
        return f"{sign}{hh:02d}{mm:02d}"
    if shape == "07:00":
        return f"{sign}{hh:02d}:{mm:02d}"
    if shape == "070000":
        return f"{sign}{hh:02d}{mm:02d}{ss:02d}"
    return f"{sign}{hh:02d}:{mm:02d}:{ss:02d}"


def _zone_name(t: datetime) -> str:
    name = t.tzname()
    if name and not (name.startswith("UTC") and len(name) > 3):
        return name
    minutes = _offset_seconds(t) // 60
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return f"{sign}{minutes // 60:02d}{minutes % 60:02d}"


def _format_fraction(chunk: str, t: datetime) -> str:
    width = min(len(chunk) - 1, 9)
    digits = f"{t.microsecond * 1000:09d}"[:width]
    if chunk[1] == "9":
        digits = digits.rstrip("0")
        if not digits:
            return ""
    return chunk[0] + digits


def _format_chunk(chunk: str, t: datetime) -> str:
    simple = _SIMPLE_CHUNKS.get(chunk)
    if simple is not None:
        return simple(t)
    if chunk == "MST":
        return _zone_name(t)
    if chunk[0] in ".,":
        return _format_fraction(chunk, t)
    return _format_zone(chunk, t)


def format_time_layout(t: datetime, layout: str) -> str:
    """Format t with a reference-time layout such as "2006-01-02T15:04:05Z07:00"."""
    t = _as_aware(t)
    parts: list[str] = []
    pos = 0
    for match in _LAYOUT_CHUNK.finditer(layout):
        parts.append(layout[pos:match.start()])
        parts.append(_format_chunk(match.group(), t))
        pos = match.end()
    parts.append(layout[pos:])
    return "".join(parts)


def _encode_time_layout(t: datetime, layout: str, enc: Any) -> None:
    append_layout = getattr(enc, "append_time_layout", None)
    if callable(append_layout):
        append_layout(t, layout)
    else:
        enc.append_string(format_time_layout(t, layout))


_ISO8601_LAYOUT = "2006-01-02T15:04:05.000Z0700"
_RFC3339_LAYOUT = "2006-01-02T15:04:05Z07:00"
_RFC3339_NANO_LAYOUT = "2006-01-02T15:04:05.999999999Z07:00"


def iso8601_time_encoder(t: datetime, enc: Any) -> None:
    """Append an ISO8601 string with millisecond precision."""
    _encode_time_layout(t, _ISO8601_LAYOUT, enc)


def rfc3339_time_encoder(t: datetime, enc: Any) -> None:
    """Append an RFC3339 string."""
    _encode_time_layout(t, _RFC3339_LAYOUT, enc)


def rfc3339_nano_time_encoder(t: datetime, enc: Any) -> None:
    """Append an RFC3339 string with up to nanosecond precision."""
    _encode_time_layout(t, _RFC3339_NANO_LAYOUT, enc)


def time_encoder_of_layout(layout: str) -> TimeEncoder:
    """Return a time encoder that formats with the given layout."""

    def encode(t: datetime, enc: Any) -> None:
        _encode_time_layout(t, layout, enc)

    return encode


def time_encoder_from_text(text: str | bytes) -> TimeEncoder:
    """Choose a time encoder by name; unknown names give epoch seconds."""
    return {
        "rfc3339nano": rfc3339_nano_time_encoder,
        "RFC3339Nano": rfc3339_nano_time_encoder,
        "rfc3339": rfc3339_time_encoder,
        "RFC3339": rfc3339_time_encoder,
        "iso8601": iso8601_time_encoder,
        "ISO8601": iso8601_time_encoder,
        "millis": epoch_millis_time_encoder,
        "nanos": epoch_nanos_time_encoder,
    }.get(_text(text), epoch_time_encoder)


def time_encoder_from_value(value: Any) -> TimeEncoder:
    """Choose a time encoder from a decoded config value.

    A mapping with a "layout" entry gives a layout encoder; a string is a
    name as in time_encoder_from_text; None gives an empty layout. Anything
    else raises TypeError.
    """
    if value is None:
        return time_encoder_of_layout("")
    if isinstance(value, Mapping):
        layout = value.get("layout", "")
        if layout is None:
            layout = ""
        if not isinstance(layout, str):
            raise TypeError(f"time encoder layout must be a string, got {type(layout).__name__}")
        return time_encoder_of_layout(layout)
    if isinstance(value, (str, bytes, bytearray)):
        return time_encoder_from_text(value)
    raise TypeError(f"cannot build a time encoder from {type(value).__name__}")


# Durations


def _duration_nanos(d: int | timedelta) -> int:
    if isinstance(d, timedelta):
        return (d.days * 86400 + d.seconds) * _NANOS_PER_SECOND + d.microseconds * 1000
    return int(d)


def seconds_duration_encoder(d: int | timedelta, enc: Any) -> None:
    """Append floating-point seconds elapsed."""
    enc.append_float(_duration_nanos(d) / 1e9)


def nanos_duration_encoder(d: int | timedelta, enc: Any) -> None:
    """Append integer nanoseconds elapsed."""
    enc.append_int(_duration_nanos(d))


def millis_duration_encoder(d: int | timedelta, enc: Any) -> None:
    """Append integer milliseconds elapsed, truncated toward zero."""
    nanos = _duration_nanos(d)
    millis = abs(nanos) // _NANOS_PER_MILLI
    enc.append_int(-millis if nanos < 0 else millis)


def _with_fraction(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    frac_text = f"{frac:0{digits}d}".rstrip("0")
    return f"{whole}.{frac_text}" if frac_text else str(whole)


def format_duration(d: int | timedelta) -> str:
    """Render a duration like "1h2m3.5s", "1.5ms" or "0s"."""
    nanos = _duration_nanos(d)
    sign = "-" if nanos < 0 else ""
    u = abs(nanos)
    if u < _NANOS_PER_SECOND:
        if u == 0:
            return "0s"
        if u < 1000:
            return f"{sign}{u}ns"
        if u < _NANOS_PER_MILLI:
            return f"{sign}{_with_fraction(u, 3)}µs"
        return f"{sign}{_with_fraction(u, 6)}ms"
    total_seconds, frac = divmod(u, _NANOS_PER_SECOND)
    seconds = _with_fraction((total_seconds % 60) * _NANOS_PER_SECOND + frac, 9)
    minutes = (total_seconds // 60) % 60
    hours = total_seconds // 3600
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def string_duration_encoder(d: int | timedelta, enc: Any) -> None:
    """Append the duration as a string such as "1m0s"."""
    enc.append_string(format_duration(d))


def duration_encoder_from_text(text: str | bytes) -> DurationEncoder:
    """Choose a duration encoder by name; unknown names give seconds."""
    return {
        "string": string_duration_encoder,
        "nanos": nanos_duration_encoder,
        "ms": millis_duration_encoder,
    }.get(_text(text), seconds_duration_encoder)


# Callers and names


def full_caller_encoder(caller: EntryCaller, enc: Any) -> None:
    """Append the caller as /full/path/to/package/file:line."""
    enc.append_string(caller.full_path())


def short_caller_encoder(caller: EntryCaller, enc: Any) -> None:
    """Append the caller as package/file:line."""
    enc.append_string(caller.trimmed_path())


def caller_encoder_from_text(text: str | bytes) -> CallerEncoder:
    """Choose a caller encoder: "full", or the short one for anything else."""
    return full_caller_encoder if _text(text) == "full" else short_caller_encoder


def full_name_encoder(logger_name: str, enc: Any) -> None:
    """Append the logger name as-is."""
    enc.append_string(logger_name)


def name_encoder_from_text(text: str | bytes) -> NameEncoder:
    """Choose a name encoder; every name currently gives the full one."""
    _text(text)
    return full_name_encoder


# Configuration

_STRING_KEYS = {
    "messageKey": "message_key",
    "levelKey": "level_key",
    "timeKey": "time_key",
    "nameKey": "name_key",
    "callerKey": "caller_key",
    "functionKey": "function_key",
    "stacktraceKey": "stacktrace_key",
    "lineEnding": "line_ending",
    "consoleSeparator": "console_separator",
}

_ENCODER_KEYS: dict[str, tuple[str, Callable[[Any], Callable[..., None]]]] = {
    "levelEncoder": ("encode_level", level_encoder_from_text),
    "timeEncoder": ("encode_time", time_encoder_from_value),
    "durationEncoder": ("encode_duration", duration_encoder_from_text),
    "callerEncoder": ("encode_caller", caller_encoder_from_text),
    "nameEncoder": ("encode_name", name_encoder_from_text),
}


@dataclass
class EncoderConfig:
    """Keys and primitive encoders used by the entry encoders.

    An empty key leaves that part of the entry out. encode_name may be None,
    in which case the full name is used.
    """

    message_key: str = ""
    level_key: str = ""
    time_key: str = ""
    name_key: str = ""
    caller_key: str = ""
    function_key: str = ""
    stacktrace_key: str = ""
    line_ending: str = ""
    encode_level: LevelEncoder | None = None
    encode_time: TimeEncoder | None = None
    encode_duration: DurationEncoder | None = None
    encode_caller: CallerEncoder | None = None
    encode_name: NameEncoder | None = None
    console_separator: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EncoderConfig:
        """Build a config from decoded JSON or YAML using camelCase keys.

        Unknown keys and None values are ignored; values of the wrong type
        raise TypeError.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"encoder config must be a mapping, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            if key in _STRING_KEYS:
                if not isinstance(value, str):
                    raise TypeError(f"{key} must be a string, got {type(value).__name__}")
                kwargs[_STRING_KEYS[key]] = value
            elif key in _ENCODER_KEYS:
                name, build = _ENCODER_KEYS[key]
                kwargs[name] = build(value)
        return cls(**kwargs)