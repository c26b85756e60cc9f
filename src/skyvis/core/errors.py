class SkyvisError(Exception):
    """Base error."""

class UnsupportedDateError(SkyvisError, ValueError):
    """Raised for calendar input before the Gregorian epoch (1582-10-15) or with invalid fields."""

class ConfigError(SkyvisError):
    """Raised when configuration values (environment, keyword overrides) are malformed."""
