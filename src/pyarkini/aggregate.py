"""Collections of repeated INI lines sharing one key.

Two storage forms exist in game server INI files::

    NPCReplacements=(FromClassName="Dodo_Character_BP_C",ToClassName="")
    NPCReplacements=(FromClassName="Raptor_Character_BP_C",ToClassName="")

    PerLevelStatsMultiplier_Player[0]=1.5
    PerLevelStatsMultiplier_Player[1]=1.0

The first is the map form (``key=``), the second the array form (``key[n]=``).
A collection owns every line matching its form in a section; the mapping
engine prunes those lines and asks the collection to render them again.
"""

from __future__ import annotations

import dataclasses
import logging
import typing
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, MutableSequence
from functools import lru_cache
from typing import Any, Generic, TypeVar

from .converters import StringAdapter, adapter_for, unquote
from .descriptors import unwrap_optional
from .errors import InvalidValueError, SchemaMismatchError
from .ini_file import split_line

logger = logging.getLogger(__name__)

AGGREGATE_METADATA_KEY = "pyarkini.aggregate"

T = TypeVar("T")
A = TypeVar("A", bound="AggregateIniValue")


def aggregate_field(key: str = "", **kwargs: Any) -> Any:
    """Declare a dataclass field that takes part in the inline format."""

    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[AGGREGATE_METADATA_KEY] = key
    return dataclasses.field(metadata=metadata, **kwargs)


def split_top_level(text: str) -> list[str]:
    """Split *text* on commas outside quotes and parentheses."""

    parts: list[str] = []
    depth = 0
    quoted = False
    current: list[str] = []
    for ch in text:
        if ch == '"':
            quoted = not quoted
        elif not quoted and ch == "(":
            depth += 1
        elif not quoted and ch == ")":
            depth -= 1
        elif not quoted and depth == 0 and ch == ",":
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    tail = "".join(current)
    if tail.strip() or parts:
        parts.append(tail)
    return parts


@lru_cache(maxsize=None)
def _aggregate_fields(cls: type) -> tuple[tuple[str, str, Any], ...]:
    hints = typing.get_type_hints(cls)
    out = []
    for f in dataclasses.fields(cls):
        if AGGREGATE_METADATA_KEY not in f.metadata:
            continue
        key = f.metadata[AGGREGATE_METADATA_KEY] or f.name
        tp = unwrap_optional(hints.get(f.name, str))
        if adapter_for(tp) is None:
            raise SchemaMismatchError(
                f"{cls.__name__}.{f.name}: unsupported aggregate type {tp!r}",
                field=f.name,
                key=key,
            )
        out.append((f.name, key, tp))
    return tuple(out)


class AggregateIniValue(ABC):
    """A structured sub-record stored inline as ``(Name=Value,...)``.

    Subclasses are dataclasses whose participating fields are declared with
    :func:`aggregate_field`.
    """

    @classmethod
    def from_ini_value(cls: type[A], text: str) -> A:
        instance = cls()
        instance.initialize_from_ini_value(text)
        return instance

    def initialize_from_ini_value(self, text: str) -> None:
        body = text.strip()
        if body.startswith("(") and body.endswith(")"):
            body = body[1:-1]
        fields = {key.lower(): (name, tp) for name, key, tp in _aggregate_fields(type(self))}
        for part in split_top_level(body):
            if "=" not in part:
                continue
            key, raw = part.split("=", 1)
            target = fields.get(key.strip().lower())
            if target is None:
                logger.debug("%s: ignoring unknown member %r", type(self).__name__, key)
                continue
            name, tp = target
            adapter = adapter_for(tp)
            try:
                value = adapter.parse(unquote(raw.strip()))  # type: ignore[union-attr]
            except ValueError as exc:
                raise InvalidValueError(
                    f"{type(self).__name__}.{name}: cannot parse {raw!r}"
                ) from exc
            setattr(self, name, value)

    def to_ini_value(self) -> str:
        parts = []
        for name, key, tp in _aggregate_fields(type(self)):
            value = getattr(self, name)
            adapter = adapter_for(tp)
            text = adapter.format(value)  # type: ignore[union-attr]
            if isinstance(adapter, StringAdapter):
                if '"' in text:
                    raise InvalidValueError(
                        f"{type(self).__name__}.{name}: text members cannot contain '\"': {text!r}"
                    )
                text = f'"{text}"'
            parts.append(f"{key}={text}")
        return "(" + ",".join(parts) + ")"

    @abstractmethod
    def is_equivalent(self, other: AggregateIniValue) -> bool:
        """Return ``True`` when *other* is the same logical entry."""

    @abstractmethod
    def get_sort_key(self) -> str:
        """Key used by callers that order entries before writing."""

    def should_save(self) -> bool:
        return True


class IniValuesCollection(ABC):
    """Field value owning every line of one key form in a section."""

    ini_collection_key: str
    is_array: bool = False
    is_enabled: bool = True

    @property
    def prefix(self) -> str:
        return self.ini_collection_key + ("[" if self.is_array else "=")

    def matches(self, line: str) -> bool:
        parsed = split_line(line)
        if parsed is None:
            return False
        key = parsed[0].lower()
        wanted = self.ini_collection_key.lower()
        if self.is_array:
            return key.startswith(wanted + "[")
        return key == wanted

    def index_of(self, line: str) -> int:
        """Return the slot number of an array-form *line*."""

        key = split_line(line)[0]  # type: ignore[index]
        text = key[len(self.ini_collection_key) + 1 :]
        if not text.endswith("]") or not text[:-1].strip().isdecimal():
            raise InvalidValueError(f"{self.ini_collection_key}: bad array index in {key!r}")
        return int(text[:-1])

    def _render(self, values: Iterable[str | None]) -> list[str]:
        """Render *values*; ``None`` marks a slot that is not written."""

        if self.is_array:
            return [f"{self.ini_collection_key}[{i}]={v}" for i, v in enumerate(values) if v is not None]
        return [f"{self.ini_collection_key}={v}" for v in values if v is not None]

    @abstractmethod
    def from_ini_values(self, lines: Iterable[str]) -> None:
        """Replace the contents with entries parsed from matching *lines*."""

    @abstractmethod
    def to_ini_values(self) -> list[str]:
        """Render the entries worth persisting as complete lines."""


class _ListCollection(IniValuesCollection, MutableSequence, Generic[T]):
    def __init__(self, ini_collection_key: str, *, is_array: bool = False, is_enabled: bool = True, items: Iterable[T] = ()) -> None:
        self.ini_collection_key = ini_collection_key
        self.is_array = is_array
        self.is_enabled = is_enabled
        self._items: list[T] = list(items)

    def __getitem__(self, index):  # type: ignore[override]
        return self._items[index]

    def __setitem__(self, index, value):  # type: ignore[override]
        self._items[index] = value

    def __delitem__(self, index):  # type: ignore[override]
        del self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def insert(self, index: int, value: T) -> None:
        self._items.insert(index, value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _ListCollection):
            return (
                self.ini_collection_key == other.ini_collection_key
                and self.is_array == other.is_array
                and self._items == other._items
            )
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.ini_collection_key!r}, {self._items!r})"

    @staticmethod
    def _raw_value(line: str) -> str:
        return line.split("=", 1)[1].strip()

    def _parse_lines(self, lines: Iterable[str], parse: Callable[[str], T]) -> list[T | None]:
        """Parse owned *lines*.

        The map form keeps line order.  The array form places every value at
        its stored index; unused slots hold ``None`` so an unchanged list
        writes back to the same keys.
        """

        if not self.is_array:
            return [parse(self._raw_value(line)) for line in lines]
        slots: dict[int, T] = {}
        for line in lines:
            slots[self.index_of(line)] = parse(self._raw_value(line))
        size = max(slots) + 1 if slots else 0
        return [slots.get(i) for i in range(size)]


class AggregateIniValueList(_ListCollection[A]):
    """Ordered list of :class:`AggregateIniValue` records."""

    def __init__(self, ini_collection_key: str, value_type: type[A], *, is_array: bool = False, is_enabled: bool = True, items: Iterable[A] = ()) -> None:
        super().__init__(ini_collection_key, is_array=is_array, is_enabled=is_enabled, items=items)
        self.value_type = value_type

    def from_ini_values(self, lines: Iterable[str]) -> None:
        self._items = self._parse_lines(lines, self.value_type.from_ini_value)  # type: ignore[assignment]

    def to_ini_values(self) -> list[str]:
        return self._render(
            item.to_ini_value() if item is not None and item.should_save() else None
            for item in self._items
        )

    def find(self, item: A) -> A | None:
        for existing in self._items:
            if existing is not None and existing.is_equivalent(item):
                return existing
        return None

    def add_or_update(self, item: A) -> None:
        """Replace the equivalent entry in place, or append *item*."""

        for idx, existing in enumerate(self._items):
            if existing is not None and existing.is_equivalent(item):
                self._items[idx] = item
                return
        self._items.append(item)

    def sort_by_key(self) -> None:
        """Sort entries by their sort key, dropping empty array slots."""

        self._items = sorted(
            (item for item in self._items if item is not None),
            key=lambda item: item.get_sort_key().lower(),
        )


class IniValueList(_ListCollection[T]):
    """Ordered list of scalar values of one type."""

    def __init__(self, ini_collection_key: str, value_type: type[T], *, is_array: bool = False, is_enabled: bool = True, items: Iterable[T] = ()) -> None:
        super().__init__(ini_collection_key, is_array=is_array, is_enabled=is_enabled, items=items)
        adapter = adapter_for(value_type)
        if adapter is None:
            raise SchemaMismatchError(
                f"no conversion rule for {value_type!r}", key=ini_collection_key
            )
        self.value_type = value_type
        self._adapter = adapter

    def _parse_one(self, raw: str) -> T:
        try:
            return self._adapter.parse(raw)
        except ValueError as exc:
            raise InvalidValueError(f"{self.ini_collection_key}: cannot parse {raw!r}") from exc

    def from_ini_values(self, lines: Iterable[str]) -> None:
        self._items = self._parse_lines(lines, self._parse_one)  # type: ignore[assignment]

    def to_ini_values(self) -> list[str]:
        return self._render(None if v is None else self._adapter.format(v) for v in self._items)
