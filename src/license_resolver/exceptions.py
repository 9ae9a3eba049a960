"""Custom exceptions for license_resolver."""


class LicenseResolverError(Exception):
    """Base exception for all license_resolver errors."""

    pass


class ConfigurationError(LicenseResolverError):
    """Exception raised when resolver settings are invalid."""

    pass
