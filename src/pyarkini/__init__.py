from .aggregate import AggregateIniValue, AggregateIniValueList, IniValueList, IniValuesCollection, aggregate_field
from .descriptors import IniEntry, IniFiles, IniSections, ini_field, schema_for
from .engine import IniSession, SystemIniFile
from .errors import ArkIniError, SchemaMismatchError, UnsupportedValueTypeError
from .ini_file import IniFile
from .models import NPCReplacement
from .profile import ServerProfile
from .profiles import ProfileStore


__all__ = [
    "AggregateIniValue",
    "AggregateIniValueList",
    "ArkIniError",
    "IniEntry",
    "IniFile",
    "IniFiles",
    "IniSections",
    "IniSession",
    "IniValueList",
    "IniValuesCollection",
    "NPCReplacement",
    "ProfileStore",
    "SchemaMismatchError",
    "ServerProfile",
    "SystemIniFile",
    "UnsupportedValueTypeError",
    "aggregate_field",
    "ini_field",
    "schema_for",
]
