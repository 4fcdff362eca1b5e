from typing import AsyncIterator, Optional

from variation_stock.models.product import Product, Variation


class ProductCatalog:
    """Read access to the commerce platform's products and variations."""
    def __init__(self):
        self.is_available = False

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def get_variation(self, variation_id: int) -> Optional[Variation]:
        raise NotImplementedError

    def iter_parent_products(self) -> AsyncIterator[Product]:
        """Every parent product, in any lifecycle state (draft, private, ...)."""
        raise NotImplementedError
