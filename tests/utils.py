from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pyarkini.aggregate import IniValueList
from pyarkini.descriptors import IniEntry, IniFiles, IniSections, ini_field

GUS = IniFiles.GAME_USER_SETTINGS
SERVER = IniSections.SERVER_SETTINGS
GAME_MODE = IniSections.GAME_MODE


def write_ini(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def read_lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


@dataclass
class PresenceConfig:
    token: str | None = ini_field(IniEntry(GUS, SERVER, "HasToken", write_bool_if_non_empty=True), default=None)


@dataclass
class PresenceOnNumber:
    count: int = ini_field(IniEntry(GUS, SERVER, "HasCount", write_bool_if_non_empty=True), default=1)


@dataclass
class UnmappableConfig:
    tags: tuple = ini_field(IniEntry(GUS, SERVER, "Tags"), default=())


@dataclass
class FooOnly:
    foo: IniValueList[int] = ini_field(
        IniEntry(IniFiles.GAME, GAME_MODE, "Foo"),
        default_factory=lambda: IniValueList("Foo", int, is_array=True),
    )


@dataclass
class ClearingConfig:
    first: str = ini_field(IniEntry(GUS, IniSections.MESSAGE_OF_THE_DAY, "Message", clear_section=True), default="")
    second: int = ini_field(IniEntry(GUS, IniSections.MESSAGE_OF_THE_DAY, "Duration", clear_section=True), default=0)


@dataclass
class BothCompanions:
    gate: bool = True
    live: bool = False
    value: int = ini_field(
        IniEntry(GUS, SERVER, "Value", conditioned_on="gate", clear_when_off="live"),
        default=0,
    )
