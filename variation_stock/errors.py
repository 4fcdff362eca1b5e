"""
Custom domain exceptions for the stock cache service.
The key derivation and sync core never raises these for missing data;
they come from the collaborators around it.
"""


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class ExternalServiceError(Exception):
    """Raised when an external service (commerce platform API) fails."""
    pass


class RetryExhaustedError(ExternalServiceError):
    """Raised when all retry attempts for an external service are exhausted."""
    pass


class CatalogError(ExternalServiceError):
    """Raised when the product catalog returns data we cannot use."""
    pass


class NormalizationError(Exception):
    """Raised when a raw platform payload cannot be normalized."""
    pass
