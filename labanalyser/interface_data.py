"""A single typed data entry exchanged between devices, widgets and the remote interface."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

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

# names recorded as the declared type when a value is stored directly
_DECLARED_NAMES: dict[ValueKind, str] = {
    ValueKind.BOOL: "boolean",
    ValueKind.STRING: "string",
}


@dataclass
class InterfaceData:
    """A value of one :class:`ValueKind` plus the metadata that travels with it.

    ``declared_type`` is the type name last declared for the entry, ``type``
    is its role (``Parameter``, ``Data`` or ``State``) and
    ``state_dependency`` names the state it depends on.
    """

    declared_type: str = ""
    type: str = ""
    state_dependency: str = ""
    _kind: ValueKind = field(default=ValueKind.BLANK, init=False, repr=False)
    _value: Any = field(default=None, init=False, repr=False)

    @property
    def kind(self) -> ValueKind:
        """The kind of value currently held."""
        return self._kind

    @property
    def value(self) -> Any:
        """The value currently held, whatever its kind."""
        return self._value

    def set_value(self, value: Any, kind: ValueKind) -> None:
        """Store ``value`` as ``kind``, replacing whatever kind was held before.

        Integers are wrapped to the width of ``kind``; floats become single
        precision for ``FLOAT``. Raises TypeError when ``value`` does not fit
        ``kind`` and ValueError for the blank kind.
        """
        if kind is ValueKind.BLANK:
            raise ValueError("cannot store a value as the blank kind")
        if kind is ValueKind.GUI_SELECTION:
            if not isinstance(value, GuiSelection):
                raise TypeError("a GuiSelection value is required")
            stored: Any = value
        elif kind is ValueKind.STRING_LIST:
            if isinstance(value, str):
                raise TypeError("a list of strings is required, not a string")
            stored = list(value)
            if not all(isinstance(item, str) for item in stored):
                raise TypeError("a list of strings is required")
        elif kind is ValueKind.DATA_PAIR:
            if not isinstance(value, DataPair):
                raise TypeError("a DataPair value is required")
            stored = value
        elif kind is ValueKind.STRING:
            if not isinstance(value, str):
                raise TypeError("a string value is required")
            stored = value
        else:
            if isinstance(value, str) or not isinstance(value, (bool, int, float)):
                raise TypeError(f"a number is required for {kind.value}")
            stored = convert(value, kind)
        self._kind = kind
        self._value = stored
        self.declared_type = _DECLARED_NAMES.get(kind, kind.value)

    def set_text(self, text: str) -> None:
        """Store ``text``: as a string if nothing is held yet, else keeping the kind."""
        if self._kind is ValueKind.BLANK:
            self._kind = ValueKind.STRING
            self._value = text
            self.declared_type = _DECLARED_NAMES[ValueKind.STRING]
        else:
            self.set_keep_type(text)

    def set_keep_type(self, value: Any) -> None:
        """Store ``value`` converted to the kind already held.

        Text appended to a string list becomes a new entry; text given to a
        selection becomes the selected entry. Raises ValueError when the held
        kind cannot take the value.
        """
        kind = self._kind
        if isinstance(value, str):
            if kind is ValueKind.STRING_LIST:
                self._value = [*self._value, value]
                return
            if kind is ValueKind.GUI_SELECTION:
                self._value = GuiSelection(value, self._value.options)
                return
            self._value = parse_text(value, kind)
            return
        if kind in (ValueKind.STRING_LIST, ValueKind.GUI_SELECTION):
            raise ValueError("Unknown cast necessary")
        self._value = convert(value, kind)

    def reset_to_type(self, name: str) -> None:
        """Declare the type ``name`` and reset the value to that kind's default.

        A name that is no known kind is recorded but leaves the value as it is.
        """
        self.declared_type = name
        try:
            kind = kind_from_name(name)
        except ValueError:
            return
        self._kind = kind
        self._value = default_value(kind)

    def get(self, kind: ValueKind) -> Any:
        """Return the value, which must be held as ``kind``; raise TypeError otherwise."""
        if self._kind is not kind:
            raise TypeError(
                f"value is held as {self._kind.value or 'blank'}, not {kind.value or 'blank'}"
            )
        if kind is ValueKind.STRING_LIST:
            return list(self._value)
        return self._value

    def as_float(self) -> float:
        """The value as a float for numeric kinds, 0.0 for everything else."""
        if self._kind.is_numeric:
            return float(self._value)
        return 0.0

    def as_text(self) -> str:
        """The value rendered as text; kinds without a text form give ''."""
        if self._kind is ValueKind.BLANK:
            return ""
        return format_value(self._value, self._kind)

    def unsigned_value(self) -> int:
        """The value if an unsigned integer is held, else 0."""
        return int(self._value) if self._kind.is_unsigned else 0

    def signed_value(self) -> int:
        """The value if a signed integer is held, else 0."""
        return int(self._value) if self._kind.is_signed else 0

    def floating_value(self) -> float:
        """The value if a floating point number is held, else 0.0."""
        return float(self._value) if self._kind.is_floating else 0.0

    def is_numeric(self) -> bool:
        return self._kind.is_numeric

    def is_bool(self) -> bool:
        return self._kind is ValueKind.BOOL

    def is_signed(self) -> bool:
        return self._kind.is_signed

    def is_unsigned(self) -> bool:
        return self._kind.is_unsigned

    def is_floating(self) -> bool:
        return self._kind.is_floating

    def is_string(self) -> bool:
        return self._kind is ValueKind.STRING

    def is_string_list(self) -> bool:
        return self._kind is ValueKind.STRING_LIST

    def is_gui_selection(self) -> bool:
        return self._kind is ValueKind.GUI_SELECTION

    def is_data_pair(self) -> bool:
        return self._kind is ValueKind.DATA_PAIR

    def is_editable(self) -> bool:
        """Only parameters can be edited."""
        return self.type == "Parameter"

    def data_type_name(self) -> str:
        """The name of the kind held, '' when nothing is held."""
        return self._kind.value

    def type_info(self) -> str:
        """Like :meth:`data_type_name`, but data pairs report no name."""
        if self._kind is ValueKind.DATA_PAIR:
            return ""
        return self._kind.value

    def copy(self) -> InterfaceData:
        """An independent copy; data pairs keep sharing their series."""
        duplicate = InterfaceData(self.declared_type, self.type, self.state_dependency)
        duplicate._kind = self._kind
        if self._kind is ValueKind.STRING_LIST:
            duplicate._value = list(self._value)
        elif self._kind is ValueKind.DATA_PAIR:
            duplicate._value = dataclasses.replace(self._value)
        else:
            duplicate._value = self._value
        return duplicate