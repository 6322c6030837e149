"""Profile documents kept by the manager, one YAML file per server."""

from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from .aggregate import AggregateIniValueList, IniValuesCollection
from .engine import SystemIniFile
from .errors import ProfileError, UnknownProfileError
from .profile import ServerProfile

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = ".profile.yaml"


def profile_to_dict(profile: ServerProfile) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in dataclasses.fields(profile):
        value = getattr(profile, f.name)
        if isinstance(value, AggregateIniValueList):
            out[f.name] = [None if item is None else item.to_ini_value() for item in value]
        elif isinstance(value, IniValuesCollection):
            out[f.name] = list(value)  # type: ignore[call-overload]
        elif isinstance(value, Enum):
            out[f.name] = value.name
        else:
            out[f.name] = value
    return out


def profile_from_dict(data: dict[str, Any]) -> ServerProfile:
    profile = ServerProfile()
    known = {f.name for f in dataclasses.fields(profile)}
    for name, value in data.items():
        if name not in known:
            logger.warning("ignoring unknown profile setting %r", name)
            continue
        current = getattr(profile, name)
        if isinstance(current, IniValuesCollection):
            if not isinstance(value, list):
                raise ProfileError(f"{name} must be a list")
            current.clear()  # type: ignore[attr-defined]
            if isinstance(current, AggregateIniValueList):
                current.extend(
                    None if v is None else current.value_type.from_ini_value(str(v)) for v in value
                )
            else:
                current.extend(value)  # type: ignore[attr-defined]
        else:
            setattr(profile, name, value)
    return profile


class ProfileStore:
    """Directory of ``*.profile.yaml`` documents."""

    def __init__(self, directory: Path | str, *, flush_workers: int | None = None) -> None:
        self.directory = Path(directory)
        self.flush_workers = flush_workers

    def path_for(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or ".." in name:
            raise ProfileError(f"invalid profile name: {name!r}")
        return self.directory / f"{name}{PROFILE_SUFFIX}"

    def list_profiles(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.name[: -len(PROFILE_SUFFIX)] for p in self.directory.glob(f"*{PROFILE_SUFFIX}"))

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> ServerProfile:
        path = self.path_for(name)
        if not path.is_file():
            raise UnknownProfileError(name)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ProfileError(f"{path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ProfileError(f"{path}: root of a profile must be a mapping")
        profile = profile_from_dict(data)
        profile.profile_name = name
        return profile

    def load_all(self) -> list[ServerProfile]:
        """Load every readable profile, skipping broken documents."""

        profiles = []
        for name in self.list_profiles():
            try:
                profiles.append(self.load(name))
            except ProfileError as exc:
                logger.warning("Failed to load profile %s: %s", name, exc)
        return profiles

    def save(self, profile: ServerProfile) -> Path:
        path = self.path_for(profile.profile_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(profile_to_dict(profile), fh, sort_keys=False, allow_unicode=True)
        tmp.replace(path)
        logger.info("Saved profile %s to %s", profile.profile_name, path)
        return path

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            return True
        return False

    # ----- INI bridge -----

    def serializer_for(self, profile: ServerProfile) -> SystemIniFile:
        return SystemIniFile(profile.config_directory(), flush_workers=self.flush_workers)

    def load_ini(self, profile: ServerProfile) -> ServerProfile:
        """Refresh *profile* from the server's INI files."""

        self.serializer_for(profile).deserialize(profile)
        return profile

    def save_ini(self, profile: ServerProfile) -> None:
        """Write *profile* into the server's INI files."""

        self.serializer_for(profile).serialize(profile)
