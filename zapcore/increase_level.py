"""A core wrapper that raises the minimum level of another core."""

from __future__ import annotations

from typing import Any, Sequence

from .entry import CheckedEntry, Entry
from .level import MAX_LEVEL, MIN_LEVEL, Level, LevelEnabler


class LevelFilterCore:
    """Filters entries by a level enabler before handing them to a core."""

    def __init__(self, core: Any, level: LevelEnabler) -> None:
        self.core = core
        self.level = level

    def enabled(self, lvl: Level) -> bool:
        """Return whether the filter lets lvl through."""
        return self.level.enabled(lvl)

    def with_fields(self, fields: Sequence[Any]) -> LevelFilterCore:
        """Return a copy whose wrapped core carries the extra fields."""
        return LevelFilterCore(self.core.with_fields(fields), self.level)

    def check(self, ent: Entry, ce: CheckedEntry | None) -> CheckedEntry | None:
        """Pass ent to the wrapped core only if the filter enables its level."""
        if not self.enabled(ent.level):
            return ce
        return self.core.check(ent, ce)

    def write(self, ent: Entry, fields: Sequence[Any]) -> None:
        """Write straight to the wrapped core."""
        self.core.write(ent, fields)

    def sync(self) -> None:
        """Flush the wrapped core."""
        self.core.sync()


def new_increase_level_core(core: Any, level: LevelEnabler) -> LevelFilterCore:
    """Wrap core so it logs only at level or above.

    Raises ValueError if level would enable something core does not.
    """
    for value in range(MAX_LEVEL, MIN_LEVEL - 1, -1):
        lvl = Level(value)
        if not core.enabled(lvl) and level.enabled(lvl):
            raise ValueError(
                f'invalid increase level, as level "{lvl}" is allowed by increased level, '
                "but not by existing core"
            )
    return LevelFilterCore(core, level)