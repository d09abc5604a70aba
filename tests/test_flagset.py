from datetime import timedelta

import pytest

from cliflow.flagset import (
    BoolValue,
    DurationValue,
    FlagError,
    FlagSet,
    FloatValue,
    IntValue,
    StringValue,
    format_duration,
    parse_bool,
    parse_duration,
    parse_float,
    parse_int,
    parse_uint,
)


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_parse_bool_true(text):
    assert parse_bool(text) is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_parse_bool_false(text):
    assert parse_bool(text) is False


@pytest.mark.parametrize("text", ["foobar", "", "yes", "tRuE"])
def test_parse_bool_rejects(text):
    with pytest.raises(ValueError, match="invalid syntax"):
        parse_bool(text)


@pytest.mark.parametrize("number", [0, 12, -42, 2**63 - 1, -(2**63)])
def test_parse_int_decimal_round_trip(number):
    assert parse_int(str(number), 64) == number


@pytest.mark.parametrize("number", [1, 255, 8589934592])
def test_parse_int_prefixed_forms(number):
    assert parse_int(hex(number), 64) == number
    assert parse_int(bin(number), 64) == number
    assert parse_int(oct(number), 64) == number
    assert parse_int("0" + format(number, "o"), 64) == number
    assert parse_int("-" + hex(number), 64) == -number


def test_parse_int_underscores():
    assert parse_int("1_000", 64) == 1000


@pytest.mark.parametrize("text", ["1.2", "foobar", "", "+", "1__0", "_1", "1_", "0x", "09"])
def test_parse_int_rejects(text):
    with pytest.raises(ValueError):
        parse_int(text, 64)


def test_parse_int_range():
    with pytest.raises(ValueError, match="out of range"):
        parse_int(str(2**63), 64)
    assert parse_int("127", 8) == 127
    with pytest.raises(ValueError, match="out of range"):
        parse_int("128", 8)


def test_parse_uint():
    assert parse_uint(str(2**64 - 1), 64) == 2**64 - 1
    with pytest.raises(ValueError):
        parse_uint("-1", 64)
    with pytest.raises(ValueError, match="out of range"):
        parse_uint(str(2**64), 64)


def test_parse_float_values():
    assert parse_float("1.2") == 1.2
    assert parse_float("1") == 1.0
    with pytest.raises(ValueError):
        parse_float("foobar")
    with pytest.raises(ValueError, match="out of range"):
        parse_float("1e400")


@pytest.mark.parametrize("number", [0.0, 0.1, 17.0, -2.5, 1e-7, 123456789.125, 1e21])
def test_float_value_text_round_trip(number):
    assert parse_float(str(FloatValue(number))) == number


def test_float_value_text_shapes():
    assert str(FloatValue(0.1)) == "0.1"
    assert str(FloatValue(17.0)) == "17"
    assert str(FloatValue(1e6)) == "1e+06"


def test_parse_duration_seconds():
    assert parse_duration("1s") == timedelta(seconds=1)
    assert format_duration(timedelta(seconds=1)) == "1s"
    assert parse_duration("0") == timedelta(0)


@pytest.mark.parametrize(
    "text", ["2h3m6s", "1s", "1.5s", "1h0m0s", "250ms", "-3m20s", "0s", "1.5ms", "7\u00b5s"]
)
def test_duration_round_trip(text):
    assert format_duration(parse_duration(text)) == text


def test_duration_units_agree():
    assert parse_duration("1h30m") == parse_duration("90m")
    assert parse_duration("1000ms") == parse_duration("1s")
    assert parse_duration("-1s") == -parse_duration("1s")


@pytest.mark.parametrize("text", ["foobar", "", ".", "-", "1.2.3s"])
def test_parse_duration_invalid(text):
    with pytest.raises(ValueError, match="time:"):
        parse_duration(text)


def test_parse_duration_missing_and_unknown_unit():
    with pytest.raises(ValueError, match="missing unit"):
        parse_duration("1")
    with pytest.raises(ValueError, match="unknown unit"):
        parse_duration("1x")


def test_value_defaults_as_text():
    assert str(BoolValue(True)) == "true"
    assert str(BoolValue()) == "false"
    assert str(IntValue(12)) == "12"
    assert str(StringValue("hello world")) == "hello world"
    assert str(DurationValue(timedelta(seconds=12))) == format_duration(parse_duration("12s"))


def test_parse_bool_flag_and_remaining_args():
    flag_set = FlagSet("test")
    flag = flag_set.add_bool("myflag", False, "doc")
    flag_set.parse(["--myflag", "bat", "baz"])
    assert flag.get() is True
    assert flag_set.args() == ["bat", "baz"]
    assert flag_set.n_flag() == 1
    assert flag_set.parsed is True


def test_parse_values_with_equals_and_separate():
    flag_set = FlagSet("test")
    flag_set.add_bool("myflag", False, "doc")
    other = flag_set.add_string("otherflag", "hello world", "doc")
    count = flag_set.add_int("n", 0, "")
    flag_set.parse(["--myflag", "--otherflag=foo", "-n", "7"])
    assert other.get() == "foo"
    assert count.get() == 7
    assert flag_set.n_flag() == 3


def test_parse_stops_at_terminator_and_non_flag():
    flag_set = FlagSet()
    flag_set.add_bool("a")
    flag_set.add_bool("b")
    flag_set.parse(["-a", "--", "-b"])
    assert flag_set.args() == ["-b"]
    assert flag_set.lookup("b").value.get() is False

    flag_set = FlagSet()
    flag_set.add_bool("a")
    flag_set.parse(["word", "-a"])
    assert flag_set.args() == ["word", "-a"]
    assert flag_set.n_flag() == 0


def test_parse_undefined_flag():
    flag_set = FlagSet()
    with pytest.raises(FlagError, match="flag provided but not defined: -x") as info:
        flag_set.parse(["-x"])
    assert info.value.flag_set is flag_set


def test_parse_help_requested():
    with pytest.raises(FlagError) as info:
        FlagSet().parse(["--help"])
    assert info.value.help_requested is True


def test_parse_needs_argument():
    flag_set = FlagSet()
    flag_set.add_int("n")
    with pytest.raises(FlagError, match="flag needs an argument: -n"):
        flag_set.parse(["-n"])


@pytest.mark.parametrize("arg", ["---x", "-=x", "--=x"])
def test_parse_bad_syntax(arg):
    with pytest.raises(FlagError, match="bad flag syntax"):
        FlagSet().parse([arg])


def test_parse_bool_explicit_values():
    flag_set = FlagSet()
    flag = flag_set.add_bool("b", True)
    flag_set.parse(["--b=false"])
    assert flag.get() is False
    with pytest.raises(FlagError, match="invalid boolean value"):
        flag_set.parse(["--b=maybe"])


def test_parse_invalid_value():
    flag_set = FlagSet()
    flag_set.add_int("n")
    with pytest.raises(FlagError, match="invalid value"):
        flag_set.parse(["-n", "foobar"])


def test_set_marks_flag_and_rejects_unknown():
    flag_set = FlagSet()
    number = flag_set.add_int("int", 5, "an int")
    assert [entry.name for entry in flag_set.visit()] == []
    flag_set.set("int", "1")
    assert number.get() == 1
    assert [entry.name for entry in flag_set.visit()] == ["int"]
    with pytest.raises(FlagError, match="no such flag -nope"):
        flag_set.set("nope", "1")
    with pytest.raises(FlagError):
        flag_set.set("int", "abc")


def test_visit_orders_by_name():
    flag_set = FlagSet()
    for name in ["zeta", "alpha", "mid"]:
        flag_set.add_bool(name)
    flag_set.parse(["--zeta", "--alpha"])
    assert [entry.name for entry in flag_set.visit()] == ["alpha", "zeta"]
    assert [entry.name for entry in flag_set.visit_all()] == ["alpha", "mid", "zeta"]


def test_redefinition_raises():
    flag_set = FlagSet("test")
    flag_set.add_bool("x")
    with pytest.raises(FlagError, match="redefined"):
        flag_set.add_int("x")


def test_entry_keeps_default_text():
    flag_set = FlagSet()
    flag_set.add_string("name", "Something", "usage")
    flag_set.parse(["--name", "other"])
    entry = flag_set.lookup("name")
    assert entry.default_text == "Something"
    assert str(entry.value) == "other"
    assert entry.usage == "usage"