import io
import threading

import pytest

from zapcore.entry import (
    CheckedEntry,
    CheckWriteAction,
    Entry,
    EntryCaller,
    ExitThread,
    PanicError,
    add_core,
    new_entry_caller,
    should,
)
from zapcore.level import Level


class RecordingCore:
    def __init__(self, fail=None):
        self.written = []
        self.fail = fail

    def write(self, ent, fields):
        self.written.append((ent, fields))
        if self.fail is not None:
            raise self.fail


@pytest.mark.parametrize(
    "caller, full, short",
    [
        (new_entry_caller(100, "/path/to/foo.go", 42, False), "undefined", "undefined"),
        (new_entry_caller(100, "/path/to/foo.go", 42, True), "/path/to/foo.go:42", "to/foo.go:42"),
        (new_entry_caller(100, "to/foo.go", 42, True), "to/foo.go:42", "to/foo.go:42"),
    ],
)
def test_entry_caller(caller, full, short):
    assert str(caller) == full
    assert caller.full_path() == full
    assert caller.trimmed_path() == short


def test_trimmed_path_without_separator():
    caller = EntryCaller(defined=True, file="foo.go", line=7)
    assert caller.trimmed_path() == "foo.go:7"


def test_new_checked_entry_is_clean():
    ent = Entry(message="hi")
    ce = should(None, ent, CheckWriteAction.WRITE_THEN_NOOP)
    assert ce.entry == ent
    assert ce.cores == []
    assert ce.error_output is None
    assert ce.action == CheckWriteAction.WRITE_THEN_NOOP


def test_add_core_creates_and_extends():
    ent = Entry(level=Level.WARN, message="m")
    a, b = RecordingCore(), RecordingCore()
    ce = add_core(None, ent, a)
    same = add_core(ce, Entry(message="other"), b)
    assert same is ce
    assert ce.entry == ent
    assert ce.cores == [a, b]


def test_write_passes_entry_and_fields_to_cores():
    ent = Entry(message="hello")
    core = RecordingCore()
    ce = add_core(None, ent, core)
    ce.write("f1", "f2")
    assert core.written == [(ent, ["f1", "f2"])]


def test_write_then_panic():
    ce = should(None, Entry(message="boom"), CheckWriteAction.WRITE_THEN_PANIC)
    with pytest.raises(PanicError) as info:
        ce.write()
    assert info.value.message == "boom"


def test_write_then_fatal():
    ce = should(None, Entry(), CheckWriteAction.WRITE_THEN_FATAL)
    with pytest.raises(SystemExit) as info:
        ce.write()
    assert info.value.code == 1
    assert not isinstance(info.value, ExitThread)


def test_write_then_goexit_raises():
    ce = should(None, Entry(), CheckWriteAction.WRITE_THEN_GOEXIT)
    with pytest.raises(ExitThread):
        ce.write()


def test_write_then_goexit_ends_thread():
    core = RecordingCore()
    ce = add_core(None, Entry(message="bye"), core)
    should(ce, Entry(), CheckWriteAction.WRITE_THEN_GOEXIT)
    state = {"finished": False, "raised": None}

    def target():
        try:
            ce.write()
        except ExitThread as exc:
            state["raised"] = exc
            raise
        state["finished"] = True

    thread = threading.Thread(target=target)
    thread.start()
    thread.join()
    assert isinstance(state["raised"], ExitThread)
    assert state["finished"] is False
    assert len(core.written) == 1


def test_write_errors_go_to_error_output():
    out = io.StringIO()
    ce = add_core(None, Entry(), RecordingCore(fail=ValueError("first")))
    add_core(ce, Entry(), RecordingCore(fail=ValueError("second")))
    ce.error_output = out
    ce.write()
    assert "write error: first; second" in out.getvalue()


def test_reuse_is_detected():
    out = io.StringIO()
    core = RecordingCore()
    ce = add_core(None, Entry(), core)
    ce.error_output = out
    ce.write()
    ce.write()
    assert len(core.written) == 1
    assert "Unsafe CheckedEntry re-use" in out.getvalue()


def test_write_without_error_output_swallows_core_failure():
    core = RecordingCore(fail=RuntimeError("bad"))
    ce = CheckedEntry(entry=Entry(message="x"), cores=[core])
    ce.write()
    assert len(core.written) == 1