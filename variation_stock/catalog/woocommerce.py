"""
Wrapper for the WooCommerce REST API.
Includes timeout, retry, response validation, error translation.
All network logic is isolated here.
"""
import asyncio
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from variation_stock.catalog.base import ProductCatalog
from variation_stock.config import config
from variation_stock.errors import CatalogError, ExternalServiceError, NormalizationError
from variation_stock.logger import logger
from variation_stock.models.product import Product, Variation
from variation_stock.normalizers.woocommerce import WooCommerceNormalizer
from variation_stock.utils.retry import async_retry


class WooCommerceCatalog(ProductCatalog):
    """
    Product data provider backed by the store's REST API.
    Stock sync never calls WooCommerce directly.
    """

    def __init__(self):
        super().__init__()
        self.base_url = f"{config.WOOCOMMERCE_URL}/wp-json/wc/v3"
        self.page_size = config.WOOCOMMERCE_PAGE_SIZE
        self.session: Optional[aiohttp.ClientSession] = None
        self.is_available = config.has_woocommerce

    async def initialize(self):
        """Initialize HTTP session (called after startup)."""
        if not self.is_available:
            logger.warning("WooCommerce catalog not configured")
            return

        self.session = aiohttp.ClientSession(
            auth=aiohttp.BasicAuth(config.WOOCOMMERCE_CONSUMER_KEY, config.WOOCOMMERCE_CONSUMER_SECRET),
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=config.REQUEST_TIMEOUT)
        )
        logger.info(f"WooCommerce catalog initialized for {config.WOOCOMMERCE_URL}")

    async def close(self):
        """Close HTTP session."""
        if self.session:
            await self.session.close()

    @async_retry(exceptions=(aiohttp.ClientError, asyncio.TimeoutError))
    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """GET a REST resource. Returns None for 404."""
        if not self.is_available or self.session is None:
            raise ExternalServiceError("WooCommerce catalog not configured")

        response = await self.session.get(f"{self.base_url}{path}", params=params)

        if response.status == 404:
            response.release()
            return None

        if response.status != 200:
            error_text = await response.text()
            logger.error(f"WooCommerce API error {response.status}: {error_text[:200]}")
            raise ExternalServiceError(
                f"WooCommerce API error {response.status}: {error_text[:200]}"
            )

        return await response.json()

    async def get_variation(self, variation_id: int) -> Optional[Variation]:
        # Variations are products too; the product endpoint resolves them by id alone.
        raw = await self._get(f"/products/{variation_id}")
        if raw is None:
            return None

        if not WooCommerceNormalizer.is_variation(raw):
            logger.warning(f"Product {variation_id} is not a variation")
            return None

        try:
            return WooCommerceNormalizer.normalize_variation(raw)
        except NormalizationError as e:
            raise CatalogError(f"Unusable variation {variation_id}: {e}") from e

    async def iter_parent_products(self) -> AsyncIterator[Product]:
        page = 1
        while True:
            items = await self._get("/products", params={
                "type": "variable",
                "status": "any",
                "per_page": self.page_size,
                "page": page
            })

            if not isinstance(items, list):
                raise CatalogError(f"Invalid product list response on page {page}")

            for raw in items:
                try:
                    yield WooCommerceNormalizer.normalize_product(raw)
                except NormalizationError as e:
                    logger.warning(f"Skipping product on page {page}: {e}")

            if len(items) < self.page_size:
                break
            page += 1
