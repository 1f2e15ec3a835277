"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class ProviderError(Exception):
    """Raised when a weather provider request or payload decode fails."""


class RouteError(Exception):
    """Raised when a requested route is unknown or unusable."""
