"""A core wrapper that samples entries to cap the cost of logging."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from enum import IntFlag
from typing import Any, Callable, Sequence

from .encoder import _duration_nanos, _unix_nanos
from .entry import CheckedEntry, Entry
from .level import Level

COUNTERS_PER_LEVEL = 4096

_FNV_OFFSET32 = 2166136261
_FNV_PRIME32 = 16777619
_MASK32 = 0xFFFFFFFF


def fnv32a(s: str | bytes) -> int:
    """Return the 32-bit FNV-1a hash of s (strings are hashed as UTF-8)."""
    data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
    h = _FNV_OFFSET32
    for byte in data:
        h ^= byte
        h = (h * _FNV_PRIME32) & _MASK32
    return h


class SamplingDecision(IntFlag):
    """A decision made by the sampler, as a bit field."""

    LOG_DROPPED = 1
    LOG_SAMPLED = 2


SamplerHookFunc = Callable[[Entry, SamplingDecision], object]
SamplerOption = Callable[["Sampler"], None]


def _nop_sampling_hook(ent: Entry, dec: SamplingDecision) -> None:
    return None


class _Counter:
    __slots__ = ("reset_at", "count")

    def __init__(self) -> None:
        self.reset_at = 0
        self.count = 0


class _Counters:
    """Per-level, per-message counters, shared between a sampler and its children."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[tuple[int, int], _Counter] = {}

    def inc_check_reset(self, lvl: int, key: str, now_ns: int, tick_ns: int) -> int:
        """Count one more entry, starting a new period if the last one ended."""
        slot = (int(lvl), fnv32a(key) % COUNTERS_PER_LEVEL)
        with self._lock:
            counter = self._counters.get(slot)
            if counter is None:
                counter = self._counters[slot] = _Counter()
            if counter.reset_at > now_ns:
                counter.count += 1
                return counter.count
            counter.count = 1
            counter.reset_at = now_ns + tick_ns
            return 1


def sampler_hook(hook: SamplerHookFunc) -> SamplerOption:
    """Return an option that makes the sampler report each decision to hook."""

    def apply(sampler: Sampler) -> None:
        sampler.hook = hook

    return apply


class Sampler:
    """Logs the first `first` entries with a given level and message each tick,
    then every `thereafter`-th one, and drops the rest."""

    def __init__(
        self,
        core: Any,
        tick: int | timedelta,
        first: int,
        thereafter: int,
        hook: SamplerHookFunc | None = None,
    ) -> None:
        self.core = core
        self.tick = tick
        self.first = int(first)
        self.thereafter = int(thereafter)
        self.hook: SamplerHookFunc = hook if hook is not None else _nop_sampling_hook
        self._counts = _Counters()

    def enabled(self, lvl: Level) -> bool:
        """Defer to the wrapped core."""
        return self.core.enabled(lvl)

    def with_fields(self, fields: Sequence[Any]) -> Sampler:
        """Return a child whose core carries the fields; counters stay shared."""
        child = Sampler(self.core.with_fields(fields), self.tick, self.first, self.thereafter, self.hook)
        child._counts = self._counts
        return child

    def check(self, ent: Entry, ce: CheckedEntry | None) -> CheckedEntry | None:
        """Decide whether to sample ent, and if so let the wrapped core check it."""
        if not self.enabled(ent.level):
            return ce
        moment = ent.time if ent.time is not None else datetime.now(timezone.utc)
        n = self._counts.inc_check_reset(
            ent.level, ent.message, _unix_nanos(moment), _duration_nanos(self.tick)
        )
        if n > self.first and (n - self.first) % self.thereafter != 0:
            self.hook(ent, SamplingDecision.LOG_DROPPED)
            return ce
        self.hook(ent, SamplingDecision.LOG_SAMPLED)
        return self.core.check(ent, ce)

    def write(self, ent: Entry, fields: Sequence[Any]) -> None:
        """Write straight to the wrapped core."""
        self.core.write(ent, fields)

    def sync(self) -> None:
        """Flush the wrapped core."""
        self.core.sync()


def new_sampler_with_options(
    core: Any, tick: int | timedelta, first: int, thereafter: int, *opts: SamplerOption
) -> Sampler:
    """Wrap core in a sampler configured by the given options."""
    sampler = Sampler(core, tick, first, thereafter)
    for opt in opts:
        opt(sampler)
    return sampler


def new_sampler(core: Any, tick: int | timedelta, first: int, thereafter: int) -> Sampler:
    """Wrap core in a sampler with no options."""
    return new_sampler_with_options(core, tick, first, thereafter)