"""Error taxonomy shared by the core and its adapters."""

from __future__ import annotations


class PumpscoutError(Exception):
    """Base class for all pumpscout errors."""


class ConfigError(PumpscoutError):
    """Configuration is missing or invalid. Fatal at startup."""


class FetchError(PumpscoutError):
    """The discovery feed could not be fetched or decoded."""


class PersistenceError(PumpscoutError):
    """The store could not record a candidate."""


class NotifyError(PumpscoutError):
    """An alert could not be delivered. Never leaves the notifier."""
