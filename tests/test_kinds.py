import math

import pytest

from labanalyser.kinds import (
    DataPair,
    GuiSelection,
    ValueKind,
    convert,
    default_value,
    format_value,
    kind_from_name,
    parse_text,
)

INTEGER_KINDS = [
    ValueKind.INT8,
    ValueKind.INT16,
    ValueKind.INT32,
    ValueKind.INT64,
    ValueKind.UINT8,
    ValueKind.UINT16,
    ValueKind.UINT32,
    ValueKind.UINT64,
]
SIGNED_KINDS = [k for k in INTEGER_KINDS if k.is_signed]
NON_SCALAR_KINDS = [
    ValueKind.STRING_LIST,
    ValueKind.GUI_SELECTION,
    ValueKind.DATA_PAIR,
    ValueKind.BLANK,
]


@pytest.mark.parametrize("kind", [k for k in ValueKind if k is not ValueKind.BLANK])
def test_kind_from_name_round_trips(kind):
    assert kind_from_name(kind.value) is kind


def test_kind_from_name_pins_reported_names():
    assert kind_from_name("vector<double>") is ValueKind.DATA_PAIR
    assert kind_from_name("QString") is ValueKind.STRING
    assert kind_from_name("GuiSelection") is ValueKind.GUI_SELECTION


@pytest.mark.parametrize("name", ["", "boolean", "int", "string"])
def test_kind_from_name_rejects_unknown(name):
    with pytest.raises(ValueError):
        kind_from_name(name)


def test_kind_classification():
    int8 = kind_from_name("int8_t")
    uint64 = kind_from_name("uint64_t")
    assert int8.is_signed is True
    assert int8.is_unsigned is False
    assert uint64.is_unsigned is True
    assert uint64.is_signed is False
    assert kind_from_name("float").is_floating is True
    assert kind_from_name("double").is_floating is True
    assert kind_from_name("bool").is_numeric is True
    assert kind_from_name("QString").is_numeric is False
    assert kind_from_name("GuiSelection").is_numeric is False


def test_default_values():
    assert default_value(ValueKind.STRING) == "empty"
    assert default_value(ValueKind.STRING_LIST) == ["empty"]
    assert default_value(ValueKind.GUI_SELECTION) == GuiSelection("empty", ("empty",))
    assert default_value(ValueKind.DATA_PAIR) == DataPair()
    assert default_value(ValueKind.BOOL) is False
    assert default_value(ValueKind.DOUBLE) == 0.0
    assert default_value(ValueKind.BLANK) is None


@pytest.mark.parametrize("kind", INTEGER_KINDS)
def test_integer_defaults_are_zero(kind):
    assert default_value(kind) == 0


def test_default_list_is_fresh():
    first = default_value(ValueKind.STRING_LIST)
    first.append("more")
    assert default_value(ValueKind.STRING_LIST) == ["empty"]


@pytest.mark.parametrize("kind", INTEGER_KINDS)
@pytest.mark.parametrize("value", [0, 1, 100])
def test_convert_keeps_in_range_integers(kind, value):
    assert convert(value, kind) == value


@pytest.mark.parametrize("kind", SIGNED_KINDS)
def test_convert_keeps_negative_signed(kind):
    assert convert(-5, kind) == -5


@pytest.mark.parametrize("value", [0, 7, 200])
def test_convert_wraps_modulo_width(value):
    assert convert(value + 256, ValueKind.UINT8) == convert(value, ValueKind.UINT8)
    assert convert(value + 2**16, ValueKind.INT16) == convert(value, ValueKind.INT16)


def test_convert_negative_to_unsigned_wraps():
    assert convert(-1, ValueKind.UINT32) == convert(0xFFFFFFFF, ValueKind.UINT32)
    assert convert(-1, ValueKind.UINT32) > 0


def test_convert_float_truncates_toward_zero():
    assert convert(3.9, ValueKind.INT32) == 3
    assert convert(-3.9, ValueKind.INT32) == -3


def test_convert_to_bool():
    assert convert(2, ValueKind.BOOL) is True
    assert convert(0, ValueKind.BOOL) is False
    assert convert(0.0, ValueKind.BOOL) is False


def test_convert_to_float_rounds_to_single_precision():
    single = convert(0.1, ValueKind.FLOAT)
    assert single != 0.1
    assert abs(single - 0.1) < 1e-7
    assert convert(single, ValueKind.FLOAT) == single


def test_convert_to_float_overflow_is_infinite():
    result = convert(1e300, ValueKind.FLOAT)
    assert result == math.inf


def test_convert_to_double():
    assert convert(3, ValueKind.DOUBLE) == 3.0
    assert convert(True, ValueKind.DOUBLE) == 1.0


def test_convert_to_string():
    assert convert(7, ValueKind.STRING) == "7"
    assert convert(True, ValueKind.STRING) == "1"
    assert convert(1234567.0, ValueKind.STRING) == "1.23457e+06"


@pytest.mark.parametrize("kind", NON_SCALAR_KINDS)
def test_convert_to_non_scalar_raises(kind):
    with pytest.raises(ValueError):
        convert(1, kind)


def test_convert_non_scalar_value_raises():
    with pytest.raises(TypeError):
        convert([1, 2], ValueKind.INT32)
    with pytest.raises(TypeError):
        convert(None, ValueKind.DOUBLE)


def test_convert_string_is_parsed():
    assert convert("12", ValueKind.INT16) == 12


def test_parse_text_integers():
    assert parse_text("  42 ", ValueKind.INT32) == 42
    assert parse_text("abc", ValueKind.INT32) == 0
    assert parse_text("4.5", ValueKind.INT32) == 0
    assert parse_text("-1", ValueKind.UINT8) == 0


def test_parse_text_reads_integers_as_32_bit():
    assert parse_text(str(2**40), ValueKind.INT64) == 0


def test_parse_text_bool():
    assert parse_text("1", ValueKind.BOOL) is True
    assert parse_text("0", ValueKind.BOOL) is False
    assert parse_text("yes", ValueKind.BOOL) is False


def test_parse_text_floating():
    assert parse_text("2.5", ValueKind.DOUBLE) == 2.5
    assert parse_text("junk", ValueKind.DOUBLE) == 0.0
    assert parse_text("1e40", ValueKind.FLOAT) == 0.0
    assert parse_text("0.5", ValueKind.FLOAT) == 0.5


def test_parse_text_string_is_identity():
    assert parse_text(" spaced ", ValueKind.STRING) == " spaced "


@pytest.mark.parametrize("kind", NON_SCALAR_KINDS)
def test_parse_text_non_scalar_raises(kind):
    with pytest.raises(ValueError):
        parse_text("x", kind)


@pytest.mark.parametrize("kind", INTEGER_KINDS)
@pytest.mark.parametrize("value", [0, 9, 127])
def test_format_parse_round_trip_integers(kind, value):
    assert parse_text(format_value(value, kind), kind) == value


@pytest.mark.parametrize("value", [True, False])
def test_format_parse_round_trip_bool(value):
    assert parse_text(format_value(value, ValueKind.BOOL), ValueKind.BOOL) is value


def test_format_value_composites():
    selection = GuiSelection("b", ["a", "b"])
    assert format_value(selection, ValueKind.GUI_SELECTION) == "b"
    assert format_value(["first", "second"], ValueKind.STRING_LIST) == "first"
    assert format_value([], ValueKind.STRING_LIST) == ""
    assert format_value(DataPair([1.0], [2.0]), ValueKind.DATA_PAIR) == ""
    assert format_value(None, ValueKind.BLANK) == ""


def test_format_value_floating():
    assert format_value(0.5, ValueKind.DOUBLE) == "0.5"
    assert format_value(math.inf, ValueKind.DOUBLE) == "inf"


def test_gui_selection_options_become_tuple():
    selection = GuiSelection("a", ["a", "b"])
    assert selection.options == ("a", "b")
    assert selection == GuiSelection("a", ("a", "b"))


def test_data_pair_equality():
    assert DataPair([1.0], [2.0], 0.5) == DataPair([1.0], [2.0], 0.5)
    assert DataPair([1.0], [2.0]).third == 0.0