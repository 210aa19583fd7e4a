import pytest

from zapcore.entry import Entry, add_core
from zapcore.field import Field, FieldType
from zapcore.increase_level import new_increase_level_core
from zapcore.level import ALL_LEVELS, Level


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

    def take_all(self):
        taken = list(self.logs)
        self.logs.clear()
        return taken


@pytest.mark.parametrize(
    "core_level, increase_level",
    [
        (Level.INFO, Level.DEBUG),
        (Level.ERROR, Level.DEBUG),
        (Level.ERROR, Level.INFO),
        (Level.ERROR, Level.WARN),
    ],
)
def test_increase_level_rejects_decrease(core_level, increase_level):
    with pytest.raises(ValueError, match="invalid increase level"):
        new_increase_level_core(ObserverCore(core_level), increase_level)


@pytest.mark.parametrize(
    "core_level, increase_level, with_fields",
    [
        (Level.INFO, Level.INFO, []),
        (Level.INFO, Level.ERROR, []),
        (Level.INFO, Level.ERROR, [Field(key="k", type=FieldType.STRING, string="v")]),
        (Level.ERROR, Level.PANIC, []),
    ],
)
def test_increase_level(core_level, increase_level, with_fields):
    core = ObserverCore(core_level)
    filtered = new_increase_level_core(core, increase_level)
    if with_fields:
        filtered = filtered.with_fields(with_fields)

    for lvl in ALL_LEVELS:
        enabled = filtered.enabled(lvl)
        entry = Entry(level=lvl)
        ce = filtered.check(entry, None)
        if ce is not None:
            ce.write()
        entries = core.take_all()

        if lvl >= increase_level:
            assert enabled is True
            assert ce is not None
            assert entries == [(entry, list(with_fields))]
        else:
            assert enabled is False
            assert ce is None
            assert entries == []

        # Write always logs, whatever the level.
        filtered.write(entry, [])
        assert core.take_all() == [(entry, list(with_fields))]


def test_increase_level_sync_delegates():
    core = ObserverCore(Level.INFO)
    filtered = new_increase_level_core(core, Level.WARN)
    filtered.sync()
    filtered.sync()
    assert core.synced == 2


def test_increase_level_error_names_level():
    with pytest.raises(ValueError) as info:
        new_increase_level_core(ObserverCore(Level.ERROR), Level.WARN)
    assert '"warn"' in str(info.value)