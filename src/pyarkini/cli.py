from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .engine import SystemIniFile
from .errors import ArkIniError, UnknownProfileError
from .paths import app_dirs, settings_file
from .profile import ServerProfile
from .profiles import ProfileStore, profile_to_dict
from .settings import ManagerSettings, load_settings

logger = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> ManagerSettings:
    return load_settings(args.settings)


def _store(args: argparse.Namespace) -> ProfileStore:
    settings = _settings(args)
    return ProfileStore(settings.profiles_dir, flush_workers=settings.flush_workers)


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def show_paths(args: argparse.Namespace) -> int:
    settings = _settings(args)
    dirs = app_dirs()
    data = {
        "user_config": dirs.user_config_path,
        "user_data": dirs.user_data_path,
        "settings_file": args.settings or settings_file(),
        "profiles_dir": settings.profiles_dir,
    }
    if args.as_json:
        print(json.dumps({k: str(v) for k, v in data.items()}))
    else:
        for k, v in data.items():
            print(f"{k}: {v}")
    return 0


# ---------------------------------------------------------------------------
# Raw INI access
# ---------------------------------------------------------------------------


def section_show(args: argparse.Namespace) -> int:
    lines = SystemIniFile(args.dir).read_section(args.file, args.section)
    for line in lines:
        print(line)
    return 0


def key_get(args: argparse.Namespace) -> int:
    value = SystemIniFile(args.dir).read_key(args.file, args.section, args.key)
    if value is None:
        return 1
    print(value)
    return 0


def key_set(args: argparse.Namespace) -> int:
    if args.clear == (args.value is not None):
        print("Use exactly one of VALUE or --clear", file=sys.stderr)
        return 2
    SystemIniFile(args.dir).write_key(args.file, args.section, args.key, None if args.clear else args.value)
    return 0


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def profile_list(args: argparse.Namespace) -> int:
    names = _store(args).list_profiles()
    if not names:
        print("No profiles found")
        return 0
    for name in names:
        print(name)
    return 0


def profile_show(args: argparse.Namespace) -> int:
    try:
        profile = _store(args).load(args.name)
    except UnknownProfileError:
        print(f"Unknown profile: {args.name}", file=sys.stderr)
        return 1
    data = profile_to_dict(profile)
    if args.as_json:
        print(json.dumps(data))
    else:
        for k, v in data.items():
            print(f"{k}: {v}")
    return 0


def profile_import(args: argparse.Namespace) -> int:
    settings = _settings(args)
    store = ProfileStore(settings.profiles_dir, flush_workers=settings.flush_workers)
    if store.exists(args.name) and not args.force:
        print(f"Profile {args.name} already exists (use --force)", file=sys.stderr)
        return 2
    profile = ServerProfile(
        profile_name=args.name,
        install_directory=str(Path(args.install_dir).expanduser()),
        config_subdir=settings.config_subdir,
    )
    store.load_ini(profile)
    print(str(store.save(profile)))
    return 0


def profile_apply(args: argparse.Namespace) -> int:
    store = _store(args)
    try:
        profile = store.load(args.name)
    except UnknownProfileError:
        print(f"Unknown profile: {args.name}", file=sys.stderr)
        return 1
    store.save_ini(profile)
    print(str(profile.config_directory()))
    return 0


def profile_delete(args: argparse.Namespace) -> int:
    return 0 if _store(args).delete(args.name) else 1


def build_parser(prog: str = "arkini") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="Game server INI configuration manager.")
    parser.add_argument("--settings", type=Path, default=None, help="Path to settings.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # paths command
    p_paths = subparsers.add_parser("paths", help="Show manager paths.")
    p_paths.add_argument("--json", dest="as_json", action="store_true")
    p_paths.set_defaults(func=show_paths)

    # section group
    p_section = subparsers.add_parser("section", help="Raw section access.")
    sp_section = p_section.add_subparsers(dest="section_cmd", required=True)

    p_sec_show = sp_section.add_parser("show", help="Print the lines of a section")
    p_sec_show.add_argument("dir", type=Path, help="Directory holding the INI files")
    p_sec_show.add_argument("file", help="INI file, e.g. Game.ini or game_user_settings")
    p_sec_show.add_argument("section")
    p_sec_show.set_defaults(func=section_show)

    # key group
    p_key = subparsers.add_parser("key", help="Raw key access.")
    sp_key = p_key.add_subparsers(dest="key_cmd", required=True)

    p_key_get = sp_key.add_parser("get", help="Print the value of KEY")
    p_key_get.add_argument("dir", type=Path)
    p_key_get.add_argument("file")
    p_key_get.add_argument("section")
    p_key_get.add_argument("key")
    p_key_get.set_defaults(func=key_get)

    p_key_set = sp_key.add_parser("set", help="Set or clear KEY")
    p_key_set.add_argument("dir", type=Path)
    p_key_set.add_argument("file")
    p_key_set.add_argument("section")
    p_key_set.add_argument("key")
    p_key_set.add_argument("value", nargs="?")
    p_key_set.add_argument("--clear", action="store_true", help="Delete the key")
    p_key_set.set_defaults(func=key_set)

    # profile group
    p_profile = subparsers.add_parser("profile", help="Manage server profiles.")
    sp_profile = p_profile.add_subparsers(dest="profile_cmd", required=True)

    p_prof_list = sp_profile.add_parser("list", help="List profiles")
    p_prof_list.set_defaults(func=profile_list)

    p_prof_show = sp_profile.add_parser("show", help="Show a profile")
    p_prof_show.add_argument("name")
    p_prof_show.add_argument("--json", dest="as_json", action="store_true")
    p_prof_show.set_defaults(func=profile_show)

    p_prof_import = sp_profile.add_parser("import", help="Create a profile from a server's INI files")
    p_prof_import.add_argument("name")
    p_prof_import.add_argument("install_dir", type=Path)
    p_prof_import.add_argument("--force", action="store_true", help="Overwrite an existing profile")
    p_prof_import.set_defaults(func=profile_import)

    p_prof_apply = sp_profile.add_parser("apply", help="Write a profile into its server's INI files")
    p_prof_apply.add_argument("name")
    p_prof_apply.set_defaults(func=profile_apply)

    p_prof_delete = sp_profile.add_parser("delete", help="Delete a profile document")
    p_prof_delete.add_argument("name")
    p_prof_delete.set_defaults(func=profile_delete)

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = "DEBUG"
    else:
        try:
            level = _settings(args).log_level
        except ArkIniError:
            level = "WARNING"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    _configure_logging(args)
    try:
        return int(func(args))
    except ArkIniError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    except SystemExit as exc:  # pragma: no cover - argparse may raise
        return int(exc.code)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
