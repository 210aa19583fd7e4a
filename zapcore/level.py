"""Logging levels, their text forms and their colored renderings."""

from __future__ import annotations

import json
from enum import IntEnum
from typing import ClassVar, Protocol, runtime_checkable

_LOWER_NAMES = {
    -1: "debug",
    0: "info",
    1: "warn",
    2: "error",
    3: "dpanic",
    4: "panic",
    5: "fatal",
}


class Level(int):
    """A logging priority. Higher levels are more important."""

    DEBUG: ClassVar[Level]
    INFO: ClassVar[Level]
    WARN: ClassVar[Level]
    ERROR: ClassVar[Level]
    DPANIC: ClassVar[Level]
    PANIC: ClassVar[Level]
    FATAL: ClassVar[Level]

    def __new__(cls, value: int = 0) -> Level:
        value = int(value)
        if not -128 <= value <= 127:
            raise ValueError(f"level {value} is out of range")
        return super().__new__(cls, value)

    def __str__(self) -> str:
        name = _LOWER_NAMES.get(int(self))
        return name if name is not None else f"Level({int(self)})"

    def __repr__(self) -> str:
        name = _LOWER_NAMES.get(int(self))
        return f"Level.{name.upper()}" if name is not None else f"Level({int(self)})"

    def capital_string(self) -> str:
        """Return an all-caps representation of the level."""
        name = _LOWER_NAMES.get(int(self))
        return name.upper() if name is not None else f"LEVEL({int(self)})"

    def marshal_text(self) -> str:
        """Return the text form of the level, as accepted by parse_level."""
        return str(self)

    def enabled(self, lvl: int) -> bool:
        """Return True if lvl is at or above this level."""
        return lvl >= self


Level.DEBUG = Level(-1)
Level.INFO = Level(0)
Level.WARN = Level(1)
Level.ERROR = Level(2)
Level.DPANIC = Level(3)
Level.PANIC = Level(4)
Level.FATAL = Level(5)

MIN_LEVEL = Level.DEBUG
MAX_LEVEL = Level.FATAL
ALL_LEVELS = tuple(Level(v) for v in range(MIN_LEVEL, MAX_LEVEL + 1))

_BY_NAME = {name: Level(value) for value, name in _LOWER_NAMES.items()}
_BY_NAME[""] = Level.INFO  # make the zero value useful


@runtime_checkable
class LevelEnabler(Protocol):
    """Decides whether a given logging level is enabled."""

    def enabled(self, lvl: Level) -> bool:
        """Return True if entries at lvl should be logged."""


def parse_level(text: str | bytes) -> Level:
    """Parse a level name, case-insensitively; the empty string means info."""
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).decode("utf-8", errors="replace")
    level = _BY_NAME.get(text)
    if level is None:
        level = _BY_NAME.get(text.lower())
    if level is None:
        raise ValueError(f"unrecognized level: {json.dumps(text, ensure_ascii=False)}")
    return level


class _Color(IntEnum):
    RED = 31
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35

    def add(self, text: str) -> str:
        return f"\x1b[{int(self)}m{text}\x1b[0m"


_LEVEL_TO_COLOR = {
    Level.DEBUG: _Color.MAGENTA,
    Level.INFO: _Color.BLUE,
    Level.WARN: _Color.YELLOW,
    Level.ERROR: _Color.RED,
    Level.DPANIC: _Color.RED,
    Level.PANIC: _Color.RED,
    Level.FATAL: _Color.RED,
}
_UNKNOWN_LEVEL_COLOR = _Color.RED

_LOWERCASE_COLOR_STRINGS = {lvl: c.add(str(lvl)) for lvl, c in _LEVEL_TO_COLOR.items()}
_CAPITAL_COLOR_STRINGS = {lvl: c.add(lvl.capital_string()) for lvl, c in _LEVEL_TO_COLOR.items()}


def lowercase_color_string(level: int) -> str:
    """Return the lowercase level name wrapped in its terminal color."""
    level = Level(level)
    cached = _LOWERCASE_COLOR_STRINGS.get(level)
    return cached if cached is not None else _UNKNOWN_LEVEL_COLOR.add(str(level))


def capital_color_string(level: int) -> str:
    """Return the all-caps level name wrapped in its terminal color."""
    level = Level(level)
    cached = _CAPITAL_COLOR_STRINGS.get(level)
    return cached if cached is not None else _UNKNOWN_LEVEL_COLOR.add(level.capital_string())