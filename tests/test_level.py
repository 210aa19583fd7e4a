import argparse

import pytest

from zapcore.level import (
    ALL_LEVELS,
    MAX_LEVEL,
    MIN_LEVEL,
    Level,
    LevelEnabler,
    capital_color_string,
    lowercase_color_string,
    parse_level,
)


@pytest.mark.parametrize(
    "lvl, text",
    [
        (Level.DEBUG, "debug"),
        (Level.INFO, "info"),
        (Level.WARN, "warn"),
        (Level.ERROR, "error"),
        (Level.DPANIC, "dpanic"),
        (Level.PANIC, "panic"),
        (Level.FATAL, "fatal"),
        (Level(-42), "Level(-42)"),
    ],
)
def test_level_string(lvl, text):
    assert str(lvl) == text
    assert lvl.capital_string() == text.upper()
    assert f"{lvl}" == text


@pytest.mark.parametrize(
    "text, level",
    [
        ("debug", Level.DEBUG),
        ("info", Level.INFO),
        ("", Level.INFO),
        ("warn", Level.WARN),
        ("error", Level.ERROR),
        ("dpanic", Level.DPANIC),
        ("panic", Level.PANIC),
        ("fatal", Level.FATAL),
    ],
)
def test_level_text(text, level):
    if text:
        assert level.marshal_text() == text
    assert parse_level(text) == level
    assert parse_level(text.encode()) == level


@pytest.mark.parametrize(
    "text, level",
    [
        ("DEBUG", Level.DEBUG),
        ("INFO", Level.INFO),
        ("WARN", Level.WARN),
        ("ERROR", Level.ERROR),
        ("DPANIC", Level.DPANIC),
        ("PANIC", Level.PANIC),
        ("FATAL", Level.FATAL),
    ],
)
def test_capital_levels_parse(text, level):
    assert parse_level(text) == level


@pytest.mark.parametrize(
    "text, level",
    [
        ("Debug", Level.DEBUG),
        ("Info", Level.INFO),
        ("Warn", Level.WARN),
        ("Error", Level.ERROR),
        ("Dpanic", Level.DPANIC),
        ("Panic", Level.PANIC),
        ("Fatal", Level.FATAL),
        ("DeBuG", Level.DEBUG),
        ("InFo", Level.INFO),
        ("WaRn", Level.WARN),
        ("ErRor", Level.ERROR),
        ("DpAnIc", Level.DPANIC),
        ("PaNiC", Level.PANIC),
        ("FaTaL", Level.FATAL),
    ],
)
def test_weird_levels_parse(text, level):
    assert parse_level(text) == level


def test_level_unmarshal_unknown_text():
    with pytest.raises(ValueError, match="unrecognized level"):
        parse_level("foo")


def test_unknown_level_error_message():
    with pytest.raises(ValueError) as info:
        parse_level("nope")
    assert str(info.value) == 'unrecognized level: "nope"'


def test_level_as_argument_type(capsys):
    parser = argparse.ArgumentParser(prog="levelTest")
    parser.add_argument("-level", type=parse_level)
    for expected in ALL_LEVELS:
        assert parse_level(str(expected)) == expected
        ns = parser.parse_args(["-level", str(expected)])
        assert ns.level == expected
    assert capsys.readouterr().err == ""
    with pytest.raises(ValueError, match="unrecognized level"):
        parse_level("nope")
    with pytest.raises(SystemExit):
        parser.parse_args(["-level", "nope"])
    assert "nope" in capsys.readouterr().err


def test_enabled():
    assert Level.WARN.enabled(Level.WARN)
    assert Level.WARN.enabled(Level.FATAL)
    assert not Level.WARN.enabled(Level.INFO)
    assert not Level.WARN.enabled(Level.DEBUG)
    assert isinstance(Level.INFO, LevelEnabler)


def test_level_range():
    assert MIN_LEVEL == Level.DEBUG
    assert MAX_LEVEL == Level.FATAL
    assert len(ALL_LEVELS) == int(MAX_LEVEL - MIN_LEVEL) + 1
    with pytest.raises(ValueError):
        Level(1000)


def test_all_levels_covered_by_color_strings():
    lower = {lowercase_color_string(lvl) for lvl in ALL_LEVELS}
    capital = {capital_color_string(lvl) for lvl in ALL_LEVELS}
    assert len(lower) == len(ALL_LEVELS)
    assert len(capital) == len(ALL_LEVELS)
    for lvl in ALL_LEVELS:
        assert str(lvl) in lowercase_color_string(lvl)
        assert lvl.capital_string() in capital_color_string(lvl)


def test_color_strings_values():
    assert lowercase_color_string(Level.INFO) == "\x1b[34minfo\x1b[0m"
    assert capital_color_string(Level.DEBUG) == "\x1b[35mDEBUG\x1b[0m"
    assert lowercase_color_string(Level(-42)) == "\x1b[31mLevel(-42)\x1b[0m"
    assert capital_color_string(Level(-42)) == "\x1b[31mLEVEL(-42)\x1b[0m"