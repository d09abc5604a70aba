import sys
from datetime import timedelta

import pytest

from cliflow.flagset import FlagError, FlagSet
from cliflow.numeric import (
    DurationFlag,
    Float64Flag,
    Int64Flag,
    IntFlag,
    Uint64Flag,
    UintFlag,
    lookup_duration,
    lookup_float64,
    lookup_int,
    lookup_int64,
    lookup_uint,
    lookup_uint64,
)


def _applied(flag):
    flag_set = FlagSet("test")
    flag.apply(flag_set)
    return flag_set


@pytest.mark.parametrize(
    "flag, expected",
    [
        (IntFlag(name="hats", value=9), "--hats value\t(default: 9)"),
        (IntFlag(name="H", value=9), "-H value\t(default: 9)"),
        (Int64Flag(name="hats", value=8589934592), "--hats value\t(default: 8589934592)"),
        (Int64Flag(name="H", value=8589934592), "-H value\t(default: 8589934592)"),
        (UintFlag(name="nerfs", value=41), "--nerfs value\t(default: 41)"),
        (UintFlag(name="N", value=41), "-N value\t(default: 41)"),
        (Uint64Flag(name="gerfs", value=8589934582), "--gerfs value\t(default: 8589934582)"),
        (Uint64Flag(name="G", value=8589934582), "-G value\t(default: 8589934582)"),
        (DurationFlag(name="hooting", value=timedelta(seconds=1)), "--hooting value\t(default: 1s)"),
        (DurationFlag(name="H", value=timedelta(seconds=1)), "-H value\t(default: 1s)"),
        (Float64Flag(name="hooting", value=0.1), "--hooting value\t(default: 0.1)"),
        (Float64Flag(name="H", value=0.1), "-H value\t(default: 0.1)"),
    ],
)
def test_help_output(flag, expected):
    assert str(flag) == expected


@pytest.mark.parametrize(
    "flag",
    [
        IntFlag(name="hats", env_var="APP_BAR"),
        Int64Flag(name="H", env_var="APP_BAR"),
        UintFlag(name="nerfs", env_var="APP_BAR"),
        Uint64Flag(name="G", env_var="APP_BAR"),
        DurationFlag(name="hooting", env_var="APP_BAR"),
        Float64Flag(name="H", env_var="APP_BAR"),
    ],
)
def test_help_output_with_env_var(flag, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("APP_BAR", "2")
    assert str(flag).endswith(" [$APP_BAR]")


def test_takes_value():
    assert IntFlag(name="x").takes_value() is True
    assert DurationFlag(name="x").takes_value() is True


@pytest.mark.parametrize(
    "text, flag, expected, lookup",
    [
        ("1s", DurationFlag(name="time", env_var="TIME"), timedelta(seconds=1), lookup_duration),
        ("1.2", Float64Flag(name="seconds", env_var="SECONDS"), 1.2, lookup_float64),
        ("1", Float64Flag(name="seconds", env_var="SECONDS"), 1.0, lookup_float64),
        ("1", Int64Flag(name="seconds", env_var="SECONDS"), 1, lookup_int64),
        ("1", IntFlag(name="seconds", env_var="SECONDS"), 1, lookup_int),
        ("1", UintFlag(name="seconds", env_var="SECONDS"), 1, lookup_uint),
        ("1", Uint64Flag(name="seconds", env_var="SECONDS"), 1, lookup_uint64),
    ],
)
def test_flags_from_env(text, flag, expected, lookup, monkeypatch):
    monkeypatch.setenv(flag.env_var, text)
    flag_set = _applied(flag)
    assert flag_set.lookup(flag.name).value.get() == expected
    assert lookup(flag.name, flag_set) == expected


@pytest.mark.parametrize(
    "text, flag, pattern",
    [
        ("foobar", DurationFlag(name="time", env_var="TIME"),
         "could not parse foobar as duration for flag time: .*"),
        ("foobar", Float64Flag(name="seconds", env_var="SECONDS"),
         "could not parse foobar as float64 value for flag seconds: .*"),
        ("1.2", Int64Flag(name="seconds", env_var="SECONDS"),
         "could not parse 1.2 as int value for flag seconds: .*"),
        ("foobar", Int64Flag(name="seconds", env_var="SECONDS"),
         "could not parse foobar as int value for flag seconds: .*"),
        ("1.2", IntFlag(name="seconds", env_var="SECONDS"),
         "could not parse 1.2 as int value for flag seconds: .*"),
        ("foobar", IntFlag(name="seconds", env_var="SECONDS"),
         "could not parse foobar as int value for flag seconds: .*"),
        ("1.2", UintFlag(name="seconds", env_var="SECONDS"),
         "could not parse 1.2 as uint value for flag seconds: .*"),
        ("foobar", UintFlag(name="seconds", env_var="SECONDS"),
         "could not parse foobar as uint value for flag seconds: .*"),
        ("1.2", Uint64Flag(name="seconds", env_var="SECONDS"),
         "could not parse 1.2 as uint64 value for flag seconds: .*"),
        ("foobar", Uint64Flag(name="seconds", env_var="SECONDS"),
         "could not parse foobar as uint64 value for flag seconds: .*"),
    ],
)
def test_flags_from_env_errors(text, flag, pattern, monkeypatch):
    monkeypatch.setenv(flag.env_var, text)
    with pytest.raises(FlagError, match=pattern):
        flag.apply(FlagSet("test"))


def test_parse_multi_int_short_name():
    flag_set = _applied(IntFlag(name="serve, s"))
    flag_set.parse(["-s", "10"])
    assert lookup_int("s", flag_set) == 10


def test_parse_destination_int():
    received = []
    flag_set = _applied(IntFlag(name="dest", destination=received.append))
    flag_set.parse(["--dest", "10"])
    assert received[-1] == 10


def test_parse_multi_int_from_env(monkeypatch):
    monkeypatch.setenv("APP_TIMEOUT_SECONDS", "10")
    flag_set = _applied(IntFlag(name="timeout, t", env_var="APP_TIMEOUT_SECONDS"))
    assert lookup_int("timeout", flag_set) == 10
    assert lookup_int("t", flag_set) == 10


def test_parse_multi_int_from_env_cascade(monkeypatch):
    monkeypatch.delenv("COMPAT_TIMEOUT_SECONDS", raising=False)
    monkeypatch.setenv("APP_TIMEOUT_SECONDS", "10")
    flag = IntFlag(name="timeout, t", env_var="COMPAT_TIMEOUT_SECONDS,APP_TIMEOUT_SECONDS")
    flag_set = _applied(flag)
    assert lookup_int("timeout", flag_set) == 10
    assert lookup_int("t", flag_set) == 10


def test_parse_multi_float64_short_name():
    flag_set = _applied(Float64Flag(name="serve, s"))
    flag_set.parse(["-s", "10.2"])
    assert lookup_float64("s", flag_set) == 10.2


def test_parse_destination_float64():
    received = []
    flag_set = _applied(Float64Flag(name="dest", destination=received.append))
    flag_set.parse(["--dest", "10.2"])
    assert received[-1] == 10.2


def test_parse_multi_float64_from_env(monkeypatch):
    monkeypatch.setenv("APP_TIMEOUT_SECONDS", "15.5")
    flag_set = _applied(Float64Flag(name="timeout, t", env_var="APP_TIMEOUT_SECONDS"))
    assert lookup_float64("timeout", flag_set) == 15.5
    assert lookup_float64("t", flag_set) == 15.5


def test_parse_multi_float64_from_env_cascade(monkeypatch):
    monkeypatch.delenv("COMPAT_TIMEOUT_SECONDS", raising=False)
    monkeypatch.setenv("APP_TIMEOUT_SECONDS", "15.5")
    flag = Float64Flag(name="timeout, t", env_var="COMPAT_TIMEOUT_SECONDS,APP_TIMEOUT_SECONDS")
    flag_set = _applied(flag)
    assert lookup_float64("timeout", flag_set) == 15.5
    assert lookup_float64("t", flag_set) == 15.5


def test_value_from_file(tmp_path, monkeypatch):
    monkeypatch.delenv("APP_MISSING", raising=False)
    path = tmp_path / "count"
    path.write_text("42")
    flag_set = _applied(IntFlag(name="count", env_var="APP_MISSING", file_path=str(path)))
    assert lookup_int("count", flag_set) == 42


def test_duration_parse_on_command_line():
    flag_set = _applied(DurationFlag(name="wait"))
    flag_set.parse(["--wait", "2h3m6s"])
    assert lookup_duration("wait", flag_set) == timedelta(hours=2, minutes=3, seconds=6)


def test_uint_rejects_negative_on_command_line():
    flag_set = _applied(UintFlag(name="n"))
    with pytest.raises(FlagError):
        flag_set.parse(["-n", "-3"])


def test_lookups_of_existing_flags():
    flag_set = FlagSet("test")
    flag_set.add_int("myflag", 12)
    flag_set.add_uint("myflagUint", 93)
    flag_set.add_float("myflag64", 17.0)
    flag_set.add_duration("wait", timedelta(seconds=12))
    assert lookup_int("myflag", flag_set) == 12
    assert lookup_int64("myflag", flag_set) == 12
    assert lookup_uint("myflagUint", flag_set) == 93
    assert lookup_uint64("myflagUint", flag_set) == 93
    assert lookup_float64("myflag64", flag_set) == 17.0
    assert lookup_duration("wait", flag_set) == timedelta(seconds=12)


def test_lookups_of_missing_flags():
    flag_set = FlagSet("test")
    assert lookup_int("nope", flag_set) == 0
    assert lookup_int64("nope", flag_set) == 0
    assert lookup_uint("nope", flag_set) == 0
    assert lookup_uint64("nope", flag_set) == 0
    assert lookup_float64("nope", flag_set) == 0.0
    assert lookup_duration("nope", flag_set) == timedelta(0)


def test_default_used_without_env(monkeypatch):
    monkeypatch.delenv("APP_UNSET", raising=False)
    flag_set = _applied(Int64Flag(name="n", value=7, env_var="APP_UNSET"))
    assert lookup_int64("n", flag_set) == 7