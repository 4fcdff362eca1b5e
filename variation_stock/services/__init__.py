"""
Services package initialization.
Builds the stock cache object graph once and centralizes the instances.
"""
from variation_stock.catalog.woocommerce import WooCommerceCatalog
from variation_stock.config import config
from variation_stock.key_deriver import KeyDeriver, untracked_attributes
from variation_stock.stock_store import create_stock_store
from variation_stock.stock_sync import StockSync

key_deriver = KeyDeriver(
    key_prefix=config.STOCK_KEY_PREFIX,
    tracked_attributes=untracked_attributes(config.UNTRACKED_ATTRIBUTES) if config.UNTRACKED_ATTRIBUTES else None
)
stock_store = create_stock_store()
catalog = WooCommerceCatalog()
stock_sync = StockSync(key_deriver, catalog, stock_store)

__all__ = [
    'key_deriver',
    'stock_store',
    'catalog',
    'stock_sync'
]
