"""Line preserving INI store.

Game server INI files repeat keys (``NPCReplacements=...`` once per entry),
use bracketed keys (``PerLevelStatsMultiplier_Player[3]=...``) and are also
rewritten by the server itself.  ``configparser`` collapses duplicates and
reorders content, so sections are kept here as ordered lists of raw lines and
only the lines the caller asks for are touched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import IniLoadError

logger = logging.getLogger(__name__)


def _trim(lines: list[str]) -> list[str]:
    """Drop trailing blank lines in place; they only separate sections."""

    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def split_line(line: str) -> tuple[str, str] | None:
    """Return ``(key, value)`` for a ``key=value`` line or ``None``."""

    if "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key or key[0] in ";#":
        return None
    return key, value.strip()


class IniSection:
    """A named, ordered group of raw lines."""

    def __init__(self, name: str, lines: Iterable[str] = ()) -> None:
        self.name = name
        self.lines: list[str] = list(lines)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"IniSection({self.name!r}, {len(self.lines)} lines)"

    def _indexes(self, key: str) -> Iterator[int]:
        wanted = key.lower()
        for idx, line in enumerate(self.lines):
            parsed = split_line(line)
            if parsed is not None and parsed[0].lower() == wanted:
                yield idx

    def get_key(self, key: str) -> str | None:
        for idx in self._indexes(key):
            return split_line(self.lines[idx])[1]  # type: ignore[index]
        return None

    def write_key(self, key: str, value: str | None) -> None:
        """Insert, update or (when *value* is ``None``) delete *key*."""

        matches = list(self._indexes(key))
        if value is None:
            for idx in reversed(matches):
                del self.lines[idx]
            return
        line = f"{key}={value}"
        if matches:
            self.lines[matches[0]] = line
        else:
            self.lines.append(line)


class IniFile:
    """In-memory document made of a header block and ordered sections."""

    def __init__(self) -> None:
        self.header: list[str] = []
        self._sections: list[IniSection] = []
        self.dirty = False

    # ----- parsing -----

    @classmethod
    def parse(cls, text: str) -> IniFile:
        doc = cls()
        current: list[str] = doc.header
        for raw in text.splitlines():
            line = raw.rstrip("\r\n")
            stripped = line.strip()
            if not stripped:
                # leading blanks of the file carry nothing
                if current or current is not doc.header:
                    current.append("")
                continue
            if stripped.startswith("[") and stripped.endswith("]"):
                _trim(current)
                name = stripped[1:-1].strip()
                section = doc.get_section(name)
                if section is None:
                    section = IniSection(name)
                    doc._sections.append(section)
                current = section.lines
                continue
            current.append(line)
        _trim(current)
        return doc

    @classmethod
    def read(cls, path: Path) -> IniFile:
        """Load *path*; a missing file yields an empty document."""

        path = Path(path)
        if not path.exists():
            logger.debug("%s does not exist, starting empty", path)
            return cls()
        try:
            text = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise IniLoadError(f"{path}: {exc}") from exc
        return cls.parse(text)

    # ----- section access -----

    @property
    def sections(self) -> list[str]:
        return [s.name for s in self._sections]

    def get_section(self, name: str) -> IniSection | None:
        wanted = name.lower()
        for section in self._sections:
            if section.name.lower() == wanted:
                return section
        return None

    def _ensure_section(self, name: str) -> IniSection:
        section = self.get_section(name)
        if section is None:
            section = IniSection(name)
            self._sections.append(section)
        return section

    def read_section(self, name: str) -> list[str]:
        section = self.get_section(name)
        return list(section.lines) if section is not None else []

    def write_section(self, name: str, lines: Iterable[str]) -> None:
        """Replace every line of section *name*, keeping its position."""

        self._ensure_section(name).lines = list(lines)
        self.dirty = True

    def read_key(self, section: str, key: str) -> str | None:
        found = self.get_section(section)
        if found is None:
            return None
        return found.get_key(key)

    def write_key(self, section: str, key: str, value: str | None) -> None:
        found = self.get_section(section)
        if found is None:
            if value is None:
                return
            found = self._ensure_section(section)
        found.write_key(key, value)
        self.dirty = True

    # ----- output -----

    def to_text(self) -> str:
        blocks: list[str] = []
        if self.header:
            blocks.append("\n".join(_trim(list(self.header))))
        for section in self._sections:
            blocks.append("\n".join([f"[{section.name}]", *_trim(list(section.lines))]))
        if not blocks:
            return ""
        return "\n\n".join(blocks) + "\n"

    def save(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8", newline="\n") as fh:
            fh.write(self.to_text())
        tmp.replace(path)
        self.dirty = False
        logger.info("Saved %s", path)
        return path
