class ArkIniError(Exception):
    """Base class for pyarkini errors."""


class SchemaMismatchError(ArkIniError):
    """Raised when a descriptor targets a type with no conversion rule."""

    def __init__(self, message: str, *, field: str | None = None, key: str | None = None, section: str | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.key = key
        self.section = section


class UnsupportedValueTypeError(ArkIniError):
    """Raised when a presence-as-bool entry is attached to a non-text value."""


class InvalidValueError(ArkIniError, ValueError):
    """Raised when stored text cannot be converted to the declared type."""


class IniLoadError(ArkIniError):
    """Raised when an INI file cannot be decoded."""


class ProfileError(ArkIniError):
    """Raised when a profile document is malformed."""


class UnknownProfileError(ProfileError):
    """Raised when a profile does not exist."""


class SettingsError(ArkIniError):
    """Raised when the manager settings file cannot be parsed."""
