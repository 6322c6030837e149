"""Declarative binding of dataclass fields to INI keys.

A configuration object is a dataclass whose mapped fields are declared with
:func:`ini_field`::

    @dataclass
    class Settings:
        session_name: str = ini_field(
            IniEntry(IniFiles.GAME_USER_SETTINGS, IniSections.SESSION_SETTINGS, "SessionName"),
            default="",
        )

The entries live in the field metadata.  :func:`schema_for` turns them into a
flat, ordered table the first time a class is mapped and reuses it afterwards.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Any

from .errors import SchemaMismatchError

INI_METADATA_KEY = "pyarkini.ini"


class _NamedEnum(Enum):
    @classmethod
    def resolve(cls, name: Any) -> _NamedEnum | str:
        """Return the member for *name* or *name* itself for free-form access."""

        if isinstance(name, cls):
            return name
        text = str(name)
        lowered = text.lower()
        for member in cls:
            if lowered in (member.name.lower(), member.value.lower()):
                return member
        return text


class IniFiles(_NamedEnum):
    GAME_USER_SETTINGS = "GameUserSettings.ini"
    GAME = "Game.ini"


class IniSections(_NamedEnum):
    SERVER_SETTINGS = "ServerSettings"
    SESSION_SETTINGS = "SessionSettings"
    GAME_SESSION = "/Script/Engine.GameSession"
    GAME_MODE = "/script/shootergame.shootergamemode"
    MESSAGE_OF_THE_DAY = "MessageOfTheDay"
    MULTI_HOME = "MultiHome"


def file_name(file: IniFiles | str) -> str:
    resolved = IniFiles.resolve(file)
    return resolved.value if isinstance(resolved, IniFiles) else resolved


def section_name(section: IniSections | str) -> str:
    resolved = IniSections.resolve(section)
    return resolved.value if isinstance(resolved, IniSections) else resolved


@dataclass(frozen=True)
class IniEntry:
    """Where and how one field is stored.

    ``key`` defaults to the field name.  ``conditioned_on`` and
    ``clear_when_off`` name boolean companion fields on the same object.
    """

    file: IniFiles
    section: IniSections
    key: str = ""
    invert_boolean: bool = False
    write_bool_if_non_empty: bool = False
    clear_section: bool = False
    quoted_string: bool = False
    conditioned_on: str | None = None
    multiline: bool = False
    clear_when_off: str | None = None

    def key_for(self, field_name: str) -> str:
        return self.key.strip() or field_name

    @property
    def section_name(self) -> str:
        return section_name(self.section)


def ini_field(*entries: IniEntry, **kwargs: Any) -> Any:
    """Declare a dataclass field mapped by one or more :class:`IniEntry`."""

    if not entries:
        raise ValueError("ini_field requires at least one IniEntry")
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[INI_METADATA_KEY] = tuple(entries)
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class BoundEntry:
    """One row of a schema table."""

    name: str
    type: Any
    entry: IniEntry

    @property
    def key(self) -> str:
        return self.entry.key_for(self.name)


def unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


_SCHEMAS: dict[type, tuple[BoundEntry, ...]] = {}
_LOCK = Lock()


def _build_schema(cls: type) -> tuple[BoundEntry, ...]:
    if not dataclasses.is_dataclass(cls):
        raise SchemaMismatchError(f"{cls.__name__} is not a dataclass")
    hints = typing.get_type_hints(cls)
    fields = dataclasses.fields(cls)
    names = {f.name for f in fields}
    rows: list[BoundEntry] = []
    for f in fields:
        entries = f.metadata.get(INI_METADATA_KEY)
        if not entries:
            continue
        tp = unwrap_optional(hints.get(f.name, Any))
        for entry in entries:
            for companion in (entry.conditioned_on, entry.clear_when_off):
                if companion and companion not in names:
                    raise SchemaMismatchError(
                        f"{cls.__name__}.{f.name} depends on unknown field {companion!r}",
                        field=f.name,
                        key=entry.key_for(f.name),
                        section=entry.section_name,
                    )
            rows.append(BoundEntry(f.name, tp, entry))
    return tuple(rows)


def schema_for(cls_or_obj: Any) -> tuple[BoundEntry, ...]:
    """Return the schema table for a configuration class or instance."""

    cls = cls_or_obj if isinstance(cls_or_obj, type) else type(cls_or_obj)
    with _LOCK:
        schema = _SCHEMAS.get(cls)
        if schema is None:
            schema = _build_schema(cls)
            _SCHEMAS[cls] = schema
    return schema
