"""Where the manager keeps its own files.

``ARKINI_APP_NAME`` changes the per-user directory name and
``ARKINI_PROFILES_DIR`` points the profile store somewhere else entirely.
"""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "pyarkini"
SETTINGS_FILE_NAME = "settings.toml"


def app_dirs() -> PlatformDirs:
    return PlatformDirs(appname=os.getenv("ARKINI_APP_NAME") or APP_NAME)


def settings_file() -> Path:
    return app_dirs().user_config_path.resolve() / SETTINGS_FILE_NAME


def default_profiles_dir() -> Path:
    override = os.getenv("ARKINI_PROFILES_DIR")
    if override:
        return Path(override).expanduser().resolve()
    return app_dirs().user_data_path.resolve() / "profiles"
