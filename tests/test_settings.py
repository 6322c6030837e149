from pathlib import Path

import pytest

from pyarkini import paths
from pyarkini.errors import SettingsError
from pyarkini.profile import DEFAULT_CONFIG_SUBDIR
from pyarkini.settings import ManagerSettings, load_settings, save_settings


def test_missing_file_gives_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("ARKINI_PROFILES_DIR", raising=False)
    settings = load_settings(tmp_path / "settings.toml")
    assert settings.config_subdir == DEFAULT_CONFIG_SUBDIR
    assert settings.flush_workers is None
    assert settings.log_level == "WARNING"
    assert settings.profiles_dir.name == "profiles"


def test_load_values(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("ARKINI_PROFILES_DIR", raising=False)
    path = tmp_path / "settings.toml"
    path.write_text(
        f'profiles_dir = "{(tmp_path / "p").as_posix()}"\nflush_workers = 2\nlog_level = "info"\n',
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.profiles_dir == tmp_path / "p"
    assert settings.flush_workers == 2
    assert settings.log_level == "INFO"


def test_env_overrides_profiles_dir(tmp_path: Path, monkeypatch):
    path = tmp_path / "settings.toml"
    path.write_text('profiles_dir = "/elsewhere"\n', encoding="utf-8")
    monkeypatch.setenv("ARKINI_PROFILES_DIR", str(tmp_path / "env"))
    assert load_settings(path).profiles_dir == tmp_path / "env"


@pytest.mark.parametrize(
    "text",
    [
        "flush_workers = 0\n",
        "flush_workers = true\n",
        'log_level = "LOUD"\n',
        "profiles_dir = [\n",
    ],
)
def test_invalid_settings(tmp_path: Path, text: str):
    path = tmp_path / "settings.toml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)


def test_save_preserves_comments(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("ARKINI_PROFILES_DIR", raising=False)
    path = tmp_path / "settings.toml"
    path.write_text("# my servers\nlog_level = \"DEBUG\"\nflush_workers = 3\n", encoding="utf-8")
    settings = load_settings(path)
    settings.log_level = "ERROR"
    settings.flush_workers = None
    save_settings(settings, path)
    text = path.read_text(encoding="utf-8")
    assert "# my servers" in text
    assert 'log_level = "ERROR"' in text
    assert "flush_workers" not in text
    assert load_settings(path).log_level == "ERROR"


def test_save_creates_file(tmp_path: Path):
    path = tmp_path / "nested" / "settings.toml"
    save_settings(ManagerSettings(profiles_dir=tmp_path / "p"), path)
    assert path.is_file()


def test_manager_files(monkeypatch, tmp_path: Path):
    monkeypatch.delenv("ARKINI_APP_NAME", raising=False)
    monkeypatch.delenv("ARKINI_PROFILES_DIR", raising=False)
    assert paths.settings_file().is_absolute()
    assert paths.settings_file().name == "settings.toml"
    assert paths.default_profiles_dir().parent.name == "pyarkini"
    monkeypatch.setenv("ARKINI_APP_NAME", "arkini-test")
    assert paths.settings_file().parent.name == "arkini-test"
    assert paths.app_dirs().appname == "arkini-test"
    monkeypatch.setenv("ARKINI_PROFILES_DIR", str(tmp_path))
    assert paths.default_profiles_dir() == tmp_path.resolve()
