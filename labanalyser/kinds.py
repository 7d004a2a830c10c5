"""Value kinds carried by interface data, and the conversion rules between them."""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """The kinds of value a data entry can hold, named as they are reported."""

    BLANK = ""
    INT8 = "int8_t"
    INT16 = "int16_t"
    INT32 = "int32_t"
    INT64 = "int64_t"
    UINT8 = "uint8_t"
    UINT16 = "uint16_t"
    UINT32 = "uint32_t"
    UINT64 = "uint64_t"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "QString"
    DOUBLE = "double"
    STRING_LIST = "QStringList"
    GUI_SELECTION = "GuiSelection"
    DATA_PAIR = "vector<double>"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_LAYOUT

    @property
    def is_signed(self) -> bool:
        return self in _INTEGER_LAYOUT and _INTEGER_LAYOUT[self][1]

    @property
    def is_unsigned(self) -> bool:
        return self in _INTEGER_LAYOUT and not _INTEGER_LAYOUT[self][1]

    @property
    def is_floating(self) -> bool:
        return self in (ValueKind.FLOAT, ValueKind.DOUBLE)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_floating or self is ValueKind.BOOL


# bit width and signedness of each integer kind
_INTEGER_LAYOUT: dict[ValueKind, tuple[int, bool]] = {
    ValueKind.INT8: (8, True),
    ValueKind.INT16: (16, True),
    ValueKind.INT32: (32, True),
    ValueKind.INT64: (64, True),
    ValueKind.UINT8: (8, False),
    ValueKind.UINT16: (16, False),
    ValueKind.UINT32: (32, False),
    ValueKind.UINT64: (64, False),
}

_FLOAT32_MAX = struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]


@dataclass
class DataPair:
    """Time and value series sharing one time axis, plus an extra scalar."""

    first: list[float] | None = None
    second: list[float] | None = None
    third: float = 0.0


@dataclass(frozen=True)
class GuiSelection:
    """A selected entry together with the options it was chosen from."""

    selected: str
    options: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))


def kind_from_name(name: str) -> ValueKind:
    """Return the kind reported under ``name``; raise ValueError if there is none."""
    try:
        kind = ValueKind(name)
    except ValueError:
        raise ValueError(f"unknown data type: {name!r}") from None
    if kind is ValueKind.BLANK:
        raise ValueError("an empty data type name names no kind")
    return kind


def default_value(kind: ValueKind) -> Any:
    """Return the value an entry takes when it is reset to ``kind``."""
    if kind.is_integer:
        return 0
    if kind is ValueKind.BOOL:
        return False
    if kind.is_floating:
        return 0.0
    if kind is ValueKind.STRING:
        return "empty"
    if kind is ValueKind.STRING_LIST:
        return ["empty"]
    if kind is ValueKind.GUI_SELECTION:
        return GuiSelection("empty", ("empty",))
    if kind is ValueKind.DATA_PAIR:
        return DataPair()
    return None


def convert(value: Any, kind: ValueKind) -> Any:
    """Cast a scalar to ``kind`` the way a C cast would.

    Strings are parsed with :func:`parse_text`. Raises TypeError for values
    that are not scalars and ValueError for kinds a scalar cannot become.
    """
    if isinstance(value, str):
        return parse_text(value, kind)
    if not isinstance(value, (bool, int, float)):
        raise TypeError(f"cannot convert {type(value).__name__} to {kind.value}")
    if kind.is_integer:
        bits, signed = _INTEGER_LAYOUT[kind]
        return _wrap(_truncate(value), bits, signed)
    if kind is ValueKind.BOOL:
        return bool(value)
    if kind is ValueKind.FLOAT:
        return _to_float32(float(value))
    if kind is ValueKind.DOUBLE:
        return float(value)
    if kind is ValueKind.STRING:
        return _number(value)
    raise ValueError("Unknown cast necessary")


def parse_text(text: str, kind: ValueKind) -> Any:
    """Read ``text`` as a scalar of ``kind``; unreadable text gives zero.

    Integers are read as 32-bit values and then cast to the target width.
    Raises ValueError for kinds that are not scalars.
    """
    if kind.is_signed:
        bits, _ = _INTEGER_LAYOUT[kind]
        return _wrap(_text_to_int(text, -(2**31), 2**31 - 1), bits, True)
    if kind.is_unsigned:
        bits, _ = _INTEGER_LAYOUT[kind]
        return _wrap(_text_to_int(text, 0, 2**32 - 1), bits, False)
    if kind is ValueKind.BOOL:
        return bool(_text_to_int(text, -(2**31), 2**31 - 1))
    if kind is ValueKind.FLOAT:
        number = _text_to_double(text)
        if math.isfinite(number) and abs(number) > _FLOAT32_MAX:
            return 0.0
        return _to_float32(number)
    if kind is ValueKind.DOUBLE:
        return _text_to_double(text)
    if kind is ValueKind.STRING:
        return text
    raise ValueError("Unknown cast necessary")


def format_value(value: Any, kind: ValueKind) -> str:
    """Render a value of ``kind`` as text; kinds without a text form give ''."""
    if kind is ValueKind.STRING:
        return str(value)
    if kind.is_integer:
        return str(int(value))
    if kind is ValueKind.BOOL:
        return "1" if value else "0"
    if kind.is_floating:
        return _format_g(float(value))
    if kind is ValueKind.GUI_SELECTION:
        return value.selected
    if kind is ValueKind.STRING_LIST:
        return value[0] if value else ""
    return ""


_INT_PATTERN = re.compile(r"\s*([+-]?[0-9]+)\s*", re.ASCII)
_DOUBLE_PATTERN = re.compile(
    r"\s*([+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|nan))\s*",
    re.ASCII | re.IGNORECASE,
)


def _text_to_int(text: str, low: int, high: int) -> int:
    match = _INT_PATTERN.fullmatch(text)
    if not match:
        return 0
    number = int(match.group(1))
    return number if low <= number <= high else 0


def _text_to_double(text: str) -> float:
    match = _DOUBLE_PATTERN.fullmatch(text)
    if not match:
        return 0.0
    return float(match.group(1))


def _truncate(value: bool | int | float) -> int:
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    return int(value)


def _wrap(number: int, bits: int, signed: bool) -> int:
    modulus = 1 << bits
    number %= modulus
    if signed and number >= modulus >> 1:
        number -= modulus
    return number


def _to_float32(number: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", number))[0]
    except OverflowError:
        return math.copysign(math.inf, number)


def _format_g(number: float) -> str:
    if math.isnan(number):
        return "nan"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    return "%.6g" % number


def _number(value: bool | int | float) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    return _format_g(value)