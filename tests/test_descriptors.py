from __future__ import annotations

from dataclasses import dataclass

import pytest

from pyarkini.descriptors import (
    IniEntry,
    IniFiles,
    IniSections,
    file_name,
    ini_field,
    schema_for,
    section_name,
)
from pyarkini.errors import SchemaMismatchError

GUS = IniFiles.GAME_USER_SETTINGS
SERVER = IniSections.SERVER_SETTINGS


@dataclass
class Sample:
    plain: str = "not mapped"
    password: str = ini_field(IniEntry(GUS, SERVER), default="")
    port: int | None = ini_field(IniEntry(GUS, SERVER, "RCONPort"), default=None)
    address: str = ini_field(
        IniEntry(GUS, IniSections.MULTI_HOME, "MultiHome", write_bool_if_non_empty=True),
        IniEntry(GUS, IniSections.SESSION_SETTINGS, "MultiHome"),
        default="",
    )


@dataclass
class BrokenCompanion:
    value: int = ini_field(IniEntry(GUS, SERVER, "Value", conditioned_on="missing"), default=0)


def test_schema_rows_in_declaration_order():
    rows = schema_for(Sample)
    assert [(r.name, r.key) for r in rows] == [
        ("password", "password"),
        ("port", "RCONPort"),
        ("address", "MultiHome"),
        ("address", "MultiHome"),
    ]
    assert rows[2].entry.section is IniSections.MULTI_HOME
    assert rows[3].entry.section is IniSections.SESSION_SETTINGS


def test_optional_annotation_unwrapped():
    rows = {r.name: r for r in schema_for(Sample)}
    assert rows["port"].type is int
    assert rows["password"].type is str


def test_schema_cached_per_class():
    assert schema_for(Sample) is schema_for(Sample())


def test_unknown_companion_rejected():
    with pytest.raises(SchemaMismatchError) as info:
        schema_for(BrokenCompanion)
    assert info.value.field == "value"
    assert info.value.section == "ServerSettings"


def test_non_dataclass_rejected():
    class Plain:
        pass

    with pytest.raises(SchemaMismatchError):
        schema_for(Plain)


def test_ini_field_needs_an_entry():
    with pytest.raises(ValueError):
        ini_field(default=1)


def test_name_resolution():
    assert IniFiles.resolve("game.ini") is IniFiles.GAME
    assert IniFiles.resolve("game_user_settings") is IniFiles.GAME_USER_SETTINGS
    assert file_name("Custom.ini") == "Custom.ini"
    assert section_name(IniSections.GAME_MODE) == "/script/shootergame.shootergamemode"
    assert section_name("messageoftheday") == "MessageOfTheDay"
    assert section_name("Unknown") == "Unknown"


def test_entry_key_defaults_to_field_name():
    entry = IniEntry(GUS, SERVER)
    assert entry.key_for("SessionName") == "SessionName"
    assert IniEntry(GUS, SERVER, " Port ").key_for("x") == "Port"
