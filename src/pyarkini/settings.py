"""Manager settings stored in ``settings.toml``.

The file is optional::

    profiles_dir = "~/ark/profiles"
    config_subdir = "ShooterGame/Saved/Config/WindowsServer"
    flush_workers = 2
    log_level = "INFO"

Saving goes through :mod:`tomlkit` so comments and key order a user added
by hand survive.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

try:  # pragma: no cover - Python <3.11
    import tomllib  # type: ignore
except Exception:  # pragma: no cover - fallback
    import tomli as tomllib  # type: ignore

import tomlkit

from .errors import SettingsError
from .paths import default_profiles_dir, settings_file
from .profile import DEFAULT_CONFIG_SUBDIR

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ManagerSettings:
    profiles_dir: Path = field(default_factory=default_profiles_dir)
    config_subdir: str = DEFAULT_CONFIG_SUBDIR
    flush_workers: int | None = None
    log_level: str = "WARNING"


def _coerce(data: dict, source: Path) -> ManagerSettings:
    settings = ManagerSettings()
    if "profiles_dir" in data:
        settings.profiles_dir = Path(str(data["profiles_dir"])).expanduser()
    if "config_subdir" in data:
        settings.config_subdir = str(data["config_subdir"])
    if "flush_workers" in data:
        workers = data["flush_workers"]
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            raise SettingsError(f"{source}: flush_workers must be a positive integer")
        settings.flush_workers = workers
    if "log_level" in data:
        level = str(data["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise SettingsError(f"{source}: unknown log_level {data['log_level']!r}")
        settings.log_level = level
    return settings


def load_settings(path: Path | None = None) -> ManagerSettings:
    """Read settings from *path*; a missing file yields the defaults."""

    path = Path(path) if path is not None else settings_file()
    if not path.is_file():
        settings = ManagerSettings()
    else:
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            raise SettingsError(f"{path}: {exc}") from exc
        settings = _coerce(data, path)
    env = os.getenv("ARKINI_PROFILES_DIR")
    if env:
        settings.profiles_dir = Path(env).expanduser()
    return settings


def save_settings(settings: ManagerSettings, path: Path | None = None) -> Path:
    path = Path(path) if path is not None else settings_file()
    if path.is_file():
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()
    for f in fields(settings):
        value = getattr(settings, f.name)
        if value is None:
            if f.name in doc:
                del doc[f.name]
            continue
        doc[f.name] = str(value) if isinstance(value, Path) else value
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    return path
