"""
Variation Stock Cache - per-parent stock status cache keyed by attribute combinations.
"""

__version__ = "1.0.0"
__author__ = "Engineering Team"

# Export main components for easy import
from variation_stock.config import config
from variation_stock.logger import logger
from variation_stock.errors import (
    ConfigError,
    ExternalServiceError,
    RetryExhaustedError,
    CatalogError,
    NormalizationError
)

__all__ = [
    'config',
    'logger',
    'ConfigError',
    'ExternalServiceError',
    'RetryExhaustedError',
    'CatalogError',
    'NormalizationError'
]
