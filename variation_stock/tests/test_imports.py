"""
Test that all modules import correctly.
Catches circular imports early.
"""
import importlib

import pytest

MODULES = [
    "variation_stock.config",
    "variation_stock.errors",
    "variation_stock.logger",
    "variation_stock.readiness",
    "variation_stock.sentry",
    "variation_stock.health",
    "variation_stock.models.product",
    "variation_stock.normalizers.woocommerce",
    "variation_stock.catalog.base",
    "variation_stock.catalog.woocommerce",
    "variation_stock.key_deriver",
    "variation_stock.stock_store",
    "variation_stock.stock_sync",
    "variation_stock.utils.retry",
    "variation_stock.services",
    "variation_stock.webhooks",
    "variation_stock.main"
]


@pytest.mark.parametrize("module_name", MODULES)
def test_imports(module_name):
    """Test importing all application modules."""
    assert importlib.import_module(module_name) is not None
