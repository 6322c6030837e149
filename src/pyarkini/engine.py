"""Descriptor driven reading and writing of server INI files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from .aggregate import IniValuesCollection
from .converters import FALSE_TEXT, TRUE_TEXT, StringAdapter, adapter_for
from .descriptors import (
    BoundEntry,
    IniFiles,
    IniSections,
    file_name,
    schema_for,
    section_name,
)
from .errors import InvalidValueError, SchemaMismatchError, UnsupportedValueTypeError
from .ini_file import IniFile

logger = logging.getLogger(__name__)

ESCAPED_NEWLINE = "\\n"


def escape_multiline(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\n", ESCAPED_NEWLINE)


def unescape_multiline(text: str) -> str:
    return text.replace(ESCAPED_NEWLINE, "\n")


class IniSession:
    """Stores opened during one mapping pass.

    Each backing file is read at most once and kept in memory until
    :meth:`flush`.  A session belongs to a single call and is not shared
    between threads.
    """

    def __init__(self, base_path: Path, *, flush_workers: int | None = None) -> None:
        self.base_path = Path(base_path)
        self.flush_workers = flush_workers
        self._stores: dict[str, IniFile] = {}
        self._cleared: set[tuple[str, str]] = set()

    def path_for(self, file: IniFiles | str) -> Path:
        return self.base_path / file_name(file)

    def open(self, file: IniFiles | str) -> IniFile:
        name = file_name(file)
        store = self._stores.get(name)
        if store is None:
            store = IniFile.read(self.base_path / name)
            self._stores[name] = store
        return store

    def read_section(self, file: IniFiles | str, section: IniSections | str) -> list[str]:
        return self.open(file).read_section(section_name(section))

    def write_section(self, file: IniFiles | str, section: IniSections | str, lines: Iterable[str]) -> None:
        self.open(file).write_section(section_name(section), lines)

    def read_key(self, file: IniFiles | str, section: IniSections | str, key: str) -> str | None:
        return self.open(file).read_key(section_name(section), key)

    def write_key(self, file: IniFiles | str, section: IniSections | str, key: str, value: str | None) -> None:
        self.open(file).write_key(section_name(section), key, value)

    def clear_section_once(self, file: IniFiles | str, section: IniSections | str) -> bool:
        marker = (file_name(file).lower(), section_name(section).lower())
        if marker in self._cleared:
            return False
        self._cleared.add(marker)
        self.write_section(file, section, [])
        return True

    def flush(self) -> list[Path]:
        """Save every modified store, one worker per file."""

        pending = [(name, store) for name, store in self._stores.items() if store.dirty]
        if not pending:
            return []
        workers = self.flush_workers or len(pending)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(store.save, self.base_path / name) for name, store in pending
            ]
        # leaving the pool waits for every save; result() re-raises failures
        return [f.result() for f in futures]


class SystemIniFile:
    """Map configuration dataclasses to the server's INI files.

    ``base_path`` is the directory holding ``GameUserSettings.ini`` and
    ``Game.ini``.  Every :meth:`deserialize` / :meth:`serialize` call opens a
    fresh :class:`IniSession`; concurrent calls against the same files must be
    serialized by the caller.
    """

    def __init__(self, base_path: Path | str, *, flush_workers: int | None = None) -> None:
        self.base_path = Path(base_path)
        self.flush_workers = flush_workers

    def session(self) -> IniSession:
        return IniSession(self.base_path, flush_workers=self.flush_workers)

    # ----- passthrough -----

    def read_section(self, file: IniFiles | str, section: IniSections | str) -> list[str]:
        return self.session().read_section(file, section)

    def write_section(self, file: IniFiles | str, section: IniSections | str, lines: Iterable[str]) -> None:
        session = self.session()
        session.write_section(file, section, lines)
        session.flush()

    def read_key(self, file: IniFiles | str, section: IniSections | str, key: str) -> str | None:
        return self.session().read_key(file, section, key)

    def write_key(self, file: IniFiles | str, section: IniSections | str, key: str, value: str | None) -> None:
        session = self.session()
        session.write_key(file, section, key, value)
        session.flush()

    # ----- mapping -----

    def deserialize(self, obj: Any) -> None:
        session = self.session()
        schema = schema_for(obj)
        logger.debug("reading %d entries for %s from %s", len(schema), type(obj).__name__, self.base_path)
        for bound in schema:
            self._read_entry(session, obj, bound)

    def serialize(self, obj: Any) -> None:
        session = self.session()
        schema = schema_for(obj)
        logger.debug("writing %d entries for %s to %s", len(schema), type(obj).__name__, self.base_path)
        for bound in schema:
            self._write_entry(session, obj, bound)
        session.flush()

    def _read_entry(self, session: IniSession, obj: Any, bound: BoundEntry) -> None:
        entry = bound.entry
        if entry.write_bool_if_non_empty:
            return

        value = getattr(obj, bound.name)
        if isinstance(value, IniValuesCollection):
            section = session.read_section(entry.file, entry.section)
            value.from_ini_values(line for line in section if value.matches(line))
            return

        stored = session.read_key(entry.file, entry.section, bound.key)
        raw = stored or ""
        if bound.type is str:
            # an absent key keeps the default; a present but empty one clears it
            if stored is None:
                return
            text = StringAdapter().parse(raw, entry)
            if entry.multiline:
                text = unescape_multiline(text)
            setattr(obj, bound.name, text)
            return

        if entry.conditioned_on:
            setattr(obj, entry.conditioned_on, bool(raw.strip()))
        if not raw.strip():
            return

        adapter = adapter_for(bound.type)
        if adapter is None:
            raise self._mismatch(bound)
        try:
            setattr(obj, bound.name, adapter.parse(raw, entry))
        except ValueError as exc:
            raise InvalidValueError(
                f"Invalid value {raw!r} for field {bound.name} "
                f"(INI key {bound.key} in section {entry.section_name})"
            ) from exc

    def _write_entry(self, session: IniSession, obj: Any, bound: BoundEntry) -> None:
        entry = bound.entry
        value = getattr(obj, bound.name)
        key = bound.key

        if entry.clear_section:
            session.clear_section_once(entry.file, entry.section)

        if isinstance(value, IniValuesCollection):
            section = session.read_section(entry.file, entry.section)
            kept = [line for line in section if not value.matches(line)]
            if value.is_enabled:
                kept.extend(value.to_ini_values())
            logger.debug("rewriting %s lines in [%s]", value.prefix, entry.section_name)
            session.write_section(entry.file, entry.section, kept)
            return

        if entry.conditioned_on and getattr(obj, entry.conditioned_on) is False:
            session.write_key(entry.file, entry.section, key, None)
            return

        if entry.clear_when_off:
            if getattr(obj, entry.clear_when_off) is False:
                session.write_key(entry.file, entry.section, key, None)
            return

        if entry.write_bool_if_non_empty:
            if bound.type is not str or not isinstance(value, (str, type(None))):
                raise UnsupportedValueTypeError(
                    f"Field {bound.name} ({type(value).__name__}) cannot be written as a "
                    f"presence flag for INI key {key} in section {entry.section_name}"
                )
            text = TRUE_TEXT if value else FALSE_TEXT
            session.write_key(entry.file, entry.section, key, text)
            return

        adapter = adapter_for(bound.type)
        if adapter is None:
            raise self._mismatch(bound)
        if value is None and bound.type is not str:
            session.write_key(entry.file, entry.section, key, None)
            return

        text = adapter.format(value, entry)
        if entry.quoted_string and not (len(text) >= 2 and text.startswith('"') and text.endswith('"')):
            text = f'"{text}"'
        if entry.multiline:
            text = escape_multiline(text)
        session.write_key(entry.file, entry.section, key, text)

    @staticmethod
    def _mismatch(bound: BoundEntry) -> SchemaMismatchError:
        return SchemaMismatchError(
            f"Unexpected field type {bound.type!r} for INI key {bound.key} "
            f"in section {bound.entry.section_name}",
            field=bound.name,
            key=bound.key,
            section=bound.entry.section_name,
        )
