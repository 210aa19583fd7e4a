"""A core wrapper that runs callbacks each time an entry is logged."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from .entry import CheckedEntry, Entry, add_core
from .error import append_errors
from .level import Level

Hook = Callable[[Entry], object]


class HookedCore:
    """Wraps a core and runs user callbacks for each logged entry.

    The callbacks run synchronously; a callback signals failure by raising.
    """

    def __init__(self, core: Any, hooks: Iterable[Hook]) -> None:
        self.core = core
        self._hooks: tuple[Hook, ...] = tuple(hooks)

    def enabled(self, lvl: Level) -> bool:
        """Defer to the wrapped core."""
        return self.core.enabled(lvl)

    def check(self, ent: Entry, ce: CheckedEntry | None) -> CheckedEntry | None:
        """Let the wrapped core decide; if it logs, register the hooks too."""
        downstream = self.core.check(ent, ce)
        if downstream is not None:
            return add_core(downstream, ent, self)
        return ce

    def with_fields(self, fields: Sequence[Any]) -> HookedCore:
        """Return a copy whose wrapped core carries the extra fields."""
        return HookedCore(self.core.with_fields(fields), self._hooks)

    def write(self, ent: Entry, fields: Sequence[Any]) -> None:
        """Run every hook; raise the combined failures, if any."""
        # The wrapped core registered itself with the CheckedEntry, so it is
        # not written here.
        err: BaseException | None = None
        for hook in self._hooks:
            try:
                hook(ent)
            except Exception as exc:
                err = append_errors(err, exc)
        if err is not None:
            raise err

    def sync(self) -> None:
        """Flush the wrapped core."""
        self.core.sync()


def register_hooks(core: Any, *hooks: Hook) -> HookedCore:
    """Wrap core so that each hook runs whenever an entry is logged."""
    return HookedCore(core, hooks)