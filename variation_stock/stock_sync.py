"""
Keeps the parent product's stock cache in step with variation stock changes.

The platform adapter calls on_parent_status_changed / on_variation_status_changed;
everything in here degrades to a no-op when there is nothing to cache.
"""
from variation_stock.catalog.base import ProductCatalog
from variation_stock.errors import ExternalServiceError
from variation_stock.key_deriver import KeyDeriver
from variation_stock.logger import logger
from variation_stock.models.product import Product, Variation
from variation_stock.stock_store import StockStore


class StockSync:
    """Writes variation stock status under every derived key on the parent."""

    def __init__(self, key_deriver: KeyDeriver, catalog: ProductCatalog, store: StockStore):
        self.key_deriver = key_deriver
        self.catalog = catalog
        self.store = store

    async def on_parent_status_changed(self, parent_id: int, status: str, product: Product) -> int:
        """
        A parent product's stock status changed: refresh the cache for each
        of its variations. The parent's own status is not applied to the
        children; each variation's current status is used instead.
        """
        if not product.children:
            return 0

        logger.info(f"Refreshing stock cache for {len(product.children)} variations of product {parent_id}")

        written = 0
        for variation_id in product.children:
            try:
                variation = await self.catalog.get_variation(variation_id)
            except ExternalServiceError as e:
                logger.warning(f"Variation {variation_id} of product {parent_id} failed to load, skipping: {e}")
                continue

            if variation is None:
                logger.warning(f"Variation {variation_id} of product {parent_id} could not be resolved, skipping")
                continue

            written += await self.cache_stock_data(variation, variation.stock_status)

        return written

    async def on_variation_status_changed(self, variation_id: int, status: str, variation: Variation) -> int:
        return await self.cache_stock_data(variation, status)

    async def cache_stock_data(self, variation: Variation, status: str) -> int:
        """
        Store the status in the parent's stock cache under every key derived
        from the variation's attributes. Returns the number of keys written.
        """
        if variation.is_orphan:
            logger.debug(f"Variation {variation.id} has no parent, nothing to cache")
            return 0

        keys = self.key_deriver.derive_keys(variation.attributes)
        if not keys:
            logger.debug(f"Variation {variation.id} has no tracked attributes, nothing to cache")
            return 0

        # Each key is written on its own; one failed write does not stop the rest.
        written = 0
        for key in keys:
            if await self.store.write(variation.parent_id, key, status):
                written += 1

        logger.debug(
            f"Cached stock status '{status}' for variation {variation.id}",
            extra={"extra": {"parent_id": variation.parent_id, "keys": len(keys), "written": written}}
        )
        return written

    async def prime_cache(self) -> int:
        """
        Rebuild the stock cache for every parent product in the catalog.
        Full-catalog maintenance path, not used in steady state. Returns the
        number of parent products processed.
        """
        logger.info("Priming variation stock cache")

        processed = 0
        written = 0
        async for product in self.catalog.iter_parent_products():
            written += await self.on_parent_status_changed(product.id, product.stock_status, product)
            processed += 1

        logger.info(f"Stock cache primed: {processed} products, {written} keys written")
        return processed
