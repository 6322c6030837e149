from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .aggregate import AggregateIniValueList, IniValueList
from .descriptors import IniEntry, IniFiles, IniSections, ini_field
from .models import NPCReplacement

DEFAULT_CONFIG_SUBDIR = "ShooterGame/Saved/Config/WindowsServer"

_GUS = IniFiles.GAME_USER_SETTINGS
_GAME = IniFiles.GAME
_SERVER = IniSections.SERVER_SETTINGS
_SESSION = IniSections.SESSION_SETTINGS
_GAME_MODE = IniSections.GAME_MODE


@dataclass
class ServerProfile:
    """Settings of one dedicated server installation.

    ``profile_name``, ``install_directory`` and the ``enable_*`` switches without
    an INI entry belong to the manager; everything declared with
    :func:`~pyarkini.descriptors.ini_field` lives in the server's INI files.
    """

    profile_name: str = "Default"
    install_directory: str = ""
    config_subdir: str = DEFAULT_CONFIG_SUBDIR

    # Administration
    server_password: str = ini_field(IniEntry(_GUS, _SERVER, "ServerPassword"), default="")
    admin_password: str = ini_field(IniEntry(_GUS, _SERVER, "ServerAdminPassword"), default="")
    spectator_password: str = ini_field(IniEntry(_GUS, _SERVER, "SpectatorPassword"), default="")
    rcon_enabled: bool = ini_field(IniEntry(_GUS, _SERVER, "RCONEnabled"), default=False)
    rcon_port: int = ini_field(IniEntry(_GUS, _SERVER, "RCONPort"), default=32330)
    active_mods: str = ini_field(IniEntry(_GUS, _SERVER, "ActiveMods"), default="")
    enable_ban_list_url: bool = False
    ban_list_url: str = ini_field(
        IniEntry(_GUS, _SERVER, "BanListURL", quoted_string=True, conditioned_on="enable_ban_list_url"),
        default="http://arkdedicated.com/banlist.txt",
    )

    # Session
    session_name: str = ini_field(IniEntry(_GUS, _SESSION, "SessionName"), default="My ARK Server")
    server_port: int = ini_field(IniEntry(_GUS, _SESSION, "Port"), default=7777)
    query_port: int = ini_field(IniEntry(_GUS, _SESSION, "QueryPort"), default=27015)
    max_players: int = ini_field(IniEntry(_GUS, IniSections.GAME_SESSION, "MaxPlayers"), default=70)
    multi_home_address: str = ini_field(
        IniEntry(_GUS, IniSections.MULTI_HOME, "MultiHome", write_bool_if_non_empty=True),
        IniEntry(_GUS, _SESSION, "MultiHome"),
        default="",
    )

    # Message of the day
    motd: str = ini_field(
        IniEntry(_GUS, IniSections.MESSAGE_OF_THE_DAY, "Message", clear_section=True, multiline=True),
        default="",
    )
    motd_duration: int = ini_field(IniEntry(_GUS, IniSections.MESSAGE_OF_THE_DAY, "Duration"), default=20)

    # Rules
    enable_hardcore: bool = ini_field(IniEntry(_GUS, _SERVER, "ServerHardcore"), default=False)
    enable_pvp: bool = ini_field(IniEntry(_GUS, _SERVER, "serverPVE", invert_boolean=True), default=True)
    allow_third_person_player: bool = ini_field(IniEntry(_GUS, _SERVER, "AllowThirdPersonPlayer"), default=True)
    difficulty_offset: float = ini_field(IniEntry(_GUS, _SERVER, "DifficultyOffset"), default=0.2)
    enable_kick_idle_players: bool = False
    kick_idle_players_period: float = ini_field(
        IniEntry(_GUS, _SERVER, "KickIdlePlayersPeriod", conditioned_on="enable_kick_idle_players"),
        default=2400.0,
    )
    persist_day_time: bool = False
    day_time: str = ini_field(
        IniEntry(_GUS, _SERVER, "DayTime", clear_when_off="persist_day_time"),
        default="",
    )

    # Game.ini
    enable_friendly_fire: bool = ini_field(
        IniEntry(_GAME, _GAME_MODE, "bDisableFriendlyFire", invert_boolean=True), default=True
    )
    override_max_experience_points_player: int | None = ini_field(
        IniEntry(_GAME, _GAME_MODE, "OverrideMaxExperiencePointsPlayer"), default=None
    )
    per_level_stats_multiplier_player: IniValueList[float] = ini_field(
        IniEntry(_GAME, _GAME_MODE, "PerLevelStatsMultiplier_Player"),
        default_factory=lambda: IniValueList("PerLevelStatsMultiplier_Player", float, is_array=True),
    )
    engram_points_per_level: IniValueList[int] = ini_field(
        IniEntry(_GAME, _GAME_MODE, "OverridePlayerLevelEngramPoints"),
        default_factory=lambda: IniValueList("OverridePlayerLevelEngramPoints", int),
    )
    npc_replacements: AggregateIniValueList[NPCReplacement] = ini_field(
        IniEntry(_GAME, _GAME_MODE, "NPCReplacements"),
        default_factory=lambda: AggregateIniValueList("NPCReplacements", NPCReplacement),
    )

    def config_directory(self) -> Path:
        """Directory holding this server's ``GameUserSettings.ini`` and ``Game.ini``."""

        return Path(self.install_directory).expanduser() / self.config_subdir
