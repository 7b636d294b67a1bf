"""Exception types shared across Boussole services."""


class BoussoleError(Exception):
    """Base class for all Boussole errors."""


class ConfigurationError(BoussoleError):
    """A required configuration value (API key, backend URL) is missing."""


class StorageError(BoussoleError):
    """The key-value storage medium failed to read or write."""
