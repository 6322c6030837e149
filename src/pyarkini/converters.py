"""Scalar conversion between INI text and Python values."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

from .descriptors import IniEntry

TRUE_TEXT = "True"
FALSE_TEXT = "False"


class ValueAdapter(Protocol):
    """Adapter for a scalar field type.

    ``parse`` raises :class:`ValueError` when *raw* does not fit the type.
    """

    def parse(self, raw: str, entry: IniEntry | None = None) -> Any:
        """Parse *raw* INI text into a Python value."""

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        """Render *value* as INI text."""


def unquote(text: str) -> str:
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


class StringAdapter:
    def parse(self, raw: str, entry: IniEntry | None = None) -> str:
        if entry is not None and entry.quoted_string:
            return unquote(raw)
        return raw

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        return "" if value is None else str(value)


class BooleanAdapter:
    def parse(self, raw: str, entry: IniEntry | None = None) -> bool:
        lowered = unquote(raw.strip()).lower()
        if lowered in {"true", "1"}:
            result = True
        elif lowered in {"false", "0"}:
            result = False
        else:
            raise ValueError(f"invalid boolean: {raw!r}")
        if entry is not None and entry.invert_boolean:
            return not result
        return result

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        flag = bool(value)
        if entry is not None and entry.invert_boolean:
            flag = not flag
        return TRUE_TEXT if flag else FALSE_TEXT


class IntegerAdapter:
    def parse(self, raw: str, entry: IniEntry | None = None) -> int:
        text = unquote(raw.strip())
        try:
            return int(text)
        except ValueError:
            number = float(text)
            if not number.is_integer():
                raise ValueError(f"invalid integer: {raw!r}") from None
            return int(number)

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        return str(int(value))


class FloatAdapter:
    def parse(self, raw: str, entry: IniEntry | None = None) -> float:
        return float(unquote(raw.strip()))

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        return repr(float(value))


class EnumAdapter:
    """Adapter for :class:`~enum.Enum` members, stored by name."""

    def __init__(self, enum_type: type[Enum]) -> None:
        self.enum_type = enum_type

    def parse(self, raw: str, entry: IniEntry | None = None) -> Enum:
        text = unquote(raw.strip())
        lowered = text.lower()
        for member in self.enum_type:
            if member.name.lower() == lowered or str(member.value).lower() == lowered:
                return member
        raise ValueError(f"invalid {self.enum_type.__name__}: {raw!r}")

    def format(self, value: Any, entry: IniEntry | None = None) -> str:
        if isinstance(value, self.enum_type):
            return value.name
        return self.parse(str(value)).name


ADAPTERS: dict[type, ValueAdapter] = {
    str: StringAdapter(),
    bool: BooleanAdapter(),
    int: IntegerAdapter(),
    float: FloatAdapter(),
}


def adapter_for(tp: Any) -> ValueAdapter | None:
    """Return the adapter for *tp* or ``None`` when there is no rule."""

    if not isinstance(tp, type):
        return None
    adapter = ADAPTERS.get(tp)
    if adapter is not None:
        return adapter
    if issubclass(tp, Enum):
        return EnumAdapter(tp)
    return None
