import io

import pytest

from zapcore.entry import CheckedEntry, Entry, add_core
from zapcore.error import MultiError
from zapcore.field import Field, FieldType
from zapcore.hook import register_hooks
from zapcore.level import Level


class ObserverCore:
    def __init__(self, level, logs=None, context=()):
        self.level = level
        self.logs = logs if logs is not None else []
        self.context = list(context)
        self.synced = 0

    def enabled(self, lvl):
        return self.level.enabled(lvl)

    def with_fields(self, fields):
        return ObserverCore(self.level, self.logs, self.context + list(fields))

    def check(self, ent, ce):
        if self.enabled(ent.level):
            return add_core(ce, ent, self)
        return ce

    def write(self, ent, fields):
        self.logs.append((ent, self.context + list(fields)))

    def sync(self):
        self.synced += 1


def int_field(key, value):
    return Field(key=key, type=FieldType.INT64, integer=value)


@pytest.mark.parametrize(
    "entry_level, core_level, expect_call",
    [
        (Level.DEBUG, Level.INFO, False),
        (Level.INFO, Level.INFO, True),
        (Level.WARN, Level.INFO, True),
    ],
)
def test_hooks(entry_level, core_level, expect_call):
    core = ObserverCore(core_level)
    field = int_field("foo", 42)
    ent = Entry(message="bar", level=entry_level)
    seen = []

    hooked = register_hooks(core, seen.append)
    ce = hooked.with_fields([field]).check(ent, None)
    if ce is not None:
        ce.write()

    if expect_call:
        assert seen == [ent]
        assert core.logs == [(ent, [field])]
    else:
        assert seen == []
        assert core.logs == []


def test_hook_failure_raises_from_write():
    def boom(ent):
        raise ValueError("boom")

    hooked = register_hooks(ObserverCore(Level.INFO), boom)
    with pytest.raises(ValueError, match="boom"):
        hooked.write(Entry(), [])


def test_multiple_hook_failures_are_combined():
    def fail_a(ent):
        raise ValueError("a")

    def fail_b(ent):
        raise ValueError("b")

    hooked = register_hooks(ObserverCore(Level.INFO), fail_a, fail_b)
    with pytest.raises(MultiError) as info:
        hooked.write(Entry(), [])
    assert str(info.value) == "a; b"


def test_hook_failure_reported_to_error_output():
    def boom(ent):
        raise ValueError("boom")

    core = ObserverCore(Level.INFO)
    hooked = register_hooks(core, boom)
    out = io.StringIO()
    ce = hooked.check(Entry(message="m"), CheckedEntry(entry=Entry(message="m"), error_output=out))
    ce.write()
    assert "write error: boom" in out.getvalue()
    assert len(core.logs) == 1


def test_enabled_and_sync_delegate():
    core = ObserverCore(Level.WARN)
    hooked = register_hooks(core)
    assert hooked.enabled(Level.ERROR) is True
    assert hooked.enabled(Level.INFO) is False
    hooked.sync()
    assert core.synced == 1