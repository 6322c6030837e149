from __future__ import annotations

from pathlib import Path

import pytest

from pyarkini.errors import IniLoadError
from pyarkini.ini_file import IniFile, IniSection, split_line

TEXT = (
    "[ServerSettings]\n"
    "ServerPassword=abc\n"
    ";comment\n"
    "RCONPort=32330\n"
    "\n"
    "[SessionSettings]\n"
    "SessionName=Test\n"
)


def test_parse_preserves_order_and_comments():
    doc = IniFile.parse(TEXT)
    assert doc.sections == ["ServerSettings", "SessionSettings"]
    assert doc.read_section("ServerSettings") == ["ServerPassword=abc", ";comment", "RCONPort=32330"]


def test_lookup_is_case_insensitive():
    doc = IniFile.parse(TEXT)
    assert doc.read_key("SERVERSETTINGS", "rconport") == "32330"
    assert doc.read_section("sessionsettings") == ["SessionName=Test"]


def test_missing_section_and_key():
    doc = IniFile.parse(TEXT)
    assert doc.read_section("MultiHome") == []
    assert doc.read_key("MultiHome", "MultiHome") is None
    assert doc.read_key("ServerSettings", "Missing") is None


def test_to_text_roundtrip():
    assert IniFile.parse(TEXT).to_text() == TEXT


def test_header_lines_are_kept():
    doc = IniFile.parse("; written by hand\n[A]\nx=1\n")
    assert doc.header == ["; written by hand"]
    assert doc.to_text() == "; written by hand\n\n[A]\nx=1\n"


def test_write_key_updates_first_match_in_place():
    doc = IniFile.parse("[A]\nfirst=1\nkey=old\nlast=3\n")
    doc.write_key("a", "KEY", "new")
    assert doc.read_section("A") == ["first=1", "KEY=new", "last=3"]
    assert doc.dirty


def test_write_key_appends_and_creates_section():
    doc = IniFile()
    doc.write_key("A", "x", "1")
    doc.write_key("A", "y", "2")
    assert doc.read_section("A") == ["x=1", "y=2"]


def test_write_key_none_removes_every_duplicate():
    doc = IniFile.parse("[A]\nk=1\nother=2\nK=3\n")
    doc.write_key("A", "k", None)
    assert doc.read_section("A") == ["other=2"]


def test_clearing_key_in_missing_section_is_noop():
    doc = IniFile()
    doc.write_key("A", "k", None)
    assert doc.sections == []
    assert not doc.dirty


def test_write_section_keeps_position_and_empty_header():
    doc = IniFile.parse("[A]\nx=1\n[B]\ny=2\n[C]\nz=3\n")
    doc.write_section("b", [])
    assert doc.sections == ["A", "B", "C"]
    assert doc.to_text() == "[A]\nx=1\n\n[B]\n\n[C]\nz=3\n"


def test_read_section_returns_copy():
    doc = IniFile.parse("[A]\nx=1\n")
    doc.read_section("A").append("y=2")
    assert doc.read_section("A") == ["x=1"]


def test_missing_file_is_empty(tmp_path: Path):
    doc = IniFile.read(tmp_path / "nope.ini")
    assert doc.sections == []
    assert doc.to_text() == ""


def test_save_and_read(tmp_path: Path):
    path = tmp_path / "sub" / "Game.ini"
    doc = IniFile.parse(TEXT)
    doc.save(path)
    assert path.read_text(encoding="utf-8") == TEXT
    assert not path.with_suffix(".ini.tmp").exists()
    assert IniFile.read(path).read_key("ServerSettings", "ServerPassword") == "abc"


def test_byte_order_mark_is_tolerated(tmp_path: Path):
    path = tmp_path / "bom.ini"
    path.write_bytes(b"\xef\xbb\xbf[S]\nA=1\n")
    assert IniFile.read(path).read_key("S", "A") == "1"


def test_undecodable_file(tmp_path: Path):
    path = tmp_path / "bad.ini"
    path.write_bytes(b"[S]\nA=\xff\xfe\n")
    with pytest.raises(IniLoadError):
        IniFile.read(path)


def test_split_line():
    assert split_line("Key = some=value ") == ("Key", "some=value")
    assert split_line("no equals here") is None
    assert split_line(";Key=1") is None


def test_section_get_key_returns_first():
    section = IniSection("A", ["k=1", "k=2"])
    assert section.get_key("K") == "1"


def test_blank_lines_inside_sections_are_kept():
    text = "\n[A]\nx=1\n\n\ny=2\n\n\n[B]\n\nz=3\n\n"
    doc = IniFile.parse(text)
    assert doc.header == []
    assert doc.read_section("A") == ["x=1", "", "", "y=2"]
    assert doc.read_section("B") == ["", "z=3"]
    doc.write_key("A", "w", "4")
    assert doc.to_text() == "[A]\nx=1\n\n\ny=2\nw=4\n\n[B]\n\nz=3\n"
    assert IniFile.parse(doc.to_text()).to_text() == doc.to_text()


def test_untouched_section_spacing_survives_save(tmp_path: Path):
    path = tmp_path / "GameUserSettings.ini"
    path.write_text("[Custom]\na=1\n\nb=2\n\n[ServerSettings]\nRCONPort=1\n", encoding="utf-8")
    doc = IniFile.read(path)
    doc.write_key("ServerSettings", "RCONPort", "2")
    doc.save(path)
    assert path.read_text(encoding="utf-8") == "[Custom]\na=1\n\nb=2\n\n[ServerSettings]\nRCONPort=2\n"
