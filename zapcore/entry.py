"""Log entries, their call sites, and entries already checked by cores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

from .error import combine_errors
from .level import Level


class PanicError(Exception):
    """Raised after writing an entry whose action is WRITE_THEN_PANIC."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ExitThread(SystemExit):
    """Raised after writing an entry whose action is WRITE_THEN_GOEXIT.

    Left uncaught in a worker thread, it ends that thread quietly.
    """


@dataclass(frozen=True)
class EntryCaller:
    """The call site of a logging function."""

    defined: bool = False
    pc: int = 0
    file: str = ""
    line: int = 0
    function: str = ""

    def __str__(self) -> str:
        return self.full_path()

    def full_path(self) -> str:
        """Return a /full/path/to/package/file:line description."""
        if not self.defined:
            return "undefined"
        return f"{self.file}:{self.line}"

    def trimmed_path(self) -> str:
        """Return a package/file:line description, keeping only the leaf directory."""
        if not self.defined:
            return "undefined"
        # Paths always use forward slashes here, whatever the platform.
        last = self.file.rfind("/")
        if last == -1:
            return self.full_path()
        penultimate = self.file.rfind("/", 0, last)
        if penultimate == -1:
            return self.full_path()
        return f"{self.file[penultimate + 1:]}:{self.line}"


def new_entry_caller(pc: int, file: str, line: int, ok: bool) -> EntryCaller:
    """Make an EntryCaller; an undefined one if ok is false."""
    if not ok:
        return EntryCaller()
    return EntryCaller(defined=True, pc=pc, file=file, line=line)


@dataclass(frozen=True)
class Entry:
    """A complete log message. Fields left empty are omitted when encoding."""

    level: Level = Level.INFO
    time: datetime | None = None
    logger_name: str = ""
    message: str = ""
    caller: EntryCaller = field(default_factory=EntryCaller)
    stack: str = ""


class CheckWriteAction(IntEnum):
    """What to do after an entry is written, in increasing severity."""

    WRITE_THEN_NOOP = 0
    WRITE_THEN_GOEXIT = 1
    WRITE_THEN_PANIC = 2
    WRITE_THEN_FATAL = 3


def _sync(output: Any) -> None:
    for name in ("sync", "flush"):
        method = getattr(output, name, None)
        if callable(method):
            method()
            return


@dataclass
class CheckedEntry:
    """An Entry together with the cores that have agreed to log it.

    A CheckedEntry must not be written more than once.
    """

    entry: Entry = field(default_factory=Entry)
    error_output: Any = None
    action: CheckWriteAction = CheckWriteAction.WRITE_THEN_NOOP
    cores: list[Any] = field(default_factory=list)
    _dirty: bool = field(default=False, repr=False, compare=False)

    def write(self, *fields: Any) -> None:
        """Write the entry to every core, then carry out the write action.

        Core failures are reported to error_output, not raised.
        """
        if self._dirty:
            if self.error_output is not None:
                self.error_output.write(
                    f"{self.entry.time} Unsafe CheckedEntry re-use near Entry {self.entry!r}.\n"
                )
                _sync(self.error_output)
            return
        self._dirty = True

        field_list = list(fields)
        err: BaseException | None = None
        for core in self.cores:
            try:
                core.write(self.entry, field_list)
            except Exception as exc:
                err = combine_errors(err, exc)
        if self.error_output is not None and err is not None:
            self.error_output.write(f"{self.entry.time} write error: {err}\n")
            _sync(self.error_output)

        action, msg = self.action, self.entry.message
        if action == CheckWriteAction.WRITE_THEN_PANIC:
            raise PanicError(msg)
        if action == CheckWriteAction.WRITE_THEN_FATAL:
            raise SystemExit(1)
        if action == CheckWriteAction.WRITE_THEN_GOEXIT:
            raise ExitThread()


def add_core(ce: CheckedEntry | None, ent: Entry, core: Any) -> CheckedEntry:
    """Add a core that agreed to log ent; create the CheckedEntry if ce is None."""
    if ce is None:
        ce = CheckedEntry(entry=ent)
    ce.cores.append(core)
    return ce


def should(ce: CheckedEntry | None, ent: Entry, action: CheckWriteAction) -> CheckedEntry:
    """Set the write action; create the CheckedEntry if ce is None."""
    if ce is None:
        ce = CheckedEntry(entry=ent)
    ce.action = CheckWriteAction(action)
    return ce