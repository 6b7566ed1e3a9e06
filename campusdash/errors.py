from __future__ import annotations


class CampusDashError(Exception):
    pass


class ConfigError(CampusDashError):
    pass


class SourceParseError(CampusDashError):
    """The legacy JSON file exists but could not be read or decoded."""


class MigrationError(CampusDashError):
    """A write inside the import transaction failed; nothing was committed."""


class DeductionError(CampusDashError):
    """A write inside the billing transaction failed; nothing was committed."""
