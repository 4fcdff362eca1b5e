from typing import Dict, Optional

# Import external dependencies at module level for easier testing
import redis.asyncio as redis
import asyncpg

from variation_stock.config import config
from variation_stock.errors import ConfigError
from variation_stock.logger import logger
from variation_stock.sentry import capture_write_failure


class StockStore:
    """Per-parent key-value storage for cached stock statuses."""
    def __init__(self):
        self.is_available = False

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def write(self, parent_id: int, key: str, value: str) -> bool:
        raise NotImplementedError

    async def read(self, parent_id: int, key: str) -> Optional[str]:
        raise NotImplementedError

    async def read_all(self, parent_id: int) -> Dict[str, str]:
        raise NotImplementedError


class RedisStockStore(StockStore):
    """Redis-backed stock store: one hash per parent product."""
    def __init__(self, url: Optional[str] = None):
        super().__init__()
        self.url = url or config.REDIS_URL
        self.redis = None

    async def initialize(self):
        try:
            self.redis = redis.from_url(self.url, decode_responses=True)
            await self.redis.ping()
            self.is_available = True
            logger.info("Redis stock store initialized")
        except Exception as e:
            logger.warning(f"Redis stock store init failed: {e}")
            self.is_available = False

    async def close(self):
        if self.redis:
            await self.redis.aclose()

    def _make_key(self, parent_id: int) -> str:
        return f"stock:{parent_id}"

    async def write(self, parent_id: int, key: str, value: str) -> bool:
        if not self.is_available:
            return False
        try:
            await self.redis.hset(self._make_key(parent_id), key, value)
            return True
        except Exception as e:
            logger.error(f"Failed to write stock cache {key} for product {parent_id}: {e}")
            capture_write_failure(parent_id, key, str(e))
            return False

    async def read(self, parent_id: int, key: str) -> Optional[str]:
        if not self.is_available:
            return None
        try:
            return await self.redis.hget(self._make_key(parent_id), key)
        except Exception as e:
            logger.error(f"Failed to read stock cache {key} for product {parent_id}: {e}")
            return None

    async def read_all(self, parent_id: int) -> Dict[str, str]:
        if not self.is_available:
            return {}
        try:
            return await self.redis.hgetall(self._make_key(parent_id))
        except Exception as e:
            logger.error(f"Failed to read stock cache for product {parent_id}: {e}")
            return {}


class PostgresStockStore(StockStore):
    """PostgreSQL-backed stock store, one row per parent and key."""
    def __init__(self, dsn: Optional[str] = None):
        super().__init__()
        self.dsn = dsn or config.DATABASE_URL
        self.pool = None

    async def initialize(self):
        try:
            self.pool = await asyncpg.create_pool(self.dsn)
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS product_stock_meta (
                        id SERIAL PRIMARY KEY,
                        parent_id BIGINT NOT NULL,
                        meta_key VARCHAR(255) NOT NULL,
                        meta_value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT NOW(),
                        UNIQUE(parent_id, meta_key)
                    );
                """)
            self.is_available = True
            logger.info("Postgres stock store initialized")
        except Exception as e:
            logger.warning(f"Postgres stock store init failed: {e}")
            self.is_available = False

    async def close(self):
        if self.pool:
            await self.pool.close()

    async def write(self, parent_id: int, key: str, value: str) -> bool:
        if not self.is_available:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    "INSERT INTO product_stock_meta (parent_id, meta_key, meta_value) VALUES ($1,$2,$3) "
                    "ON CONFLICT (parent_id, meta_key) DO UPDATE SET meta_value=$3, updated_at=NOW()",
                    parent_id, key, value
                )
            return True
        except Exception as e:
            logger.error(f"Failed to write stock cache {key} for product {parent_id}: {e}")
            capture_write_failure(parent_id, key, str(e))
            return False

    async def read(self, parent_id: int, key: str) -> Optional[str]:
        if not self.is_available:
            return None
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval(
                    "SELECT meta_value FROM product_stock_meta WHERE parent_id=$1 AND meta_key=$2",
                    parent_id, key
                )
        except Exception as e:
            logger.error(f"Failed to read stock cache {key} for product {parent_id}: {e}")
            return None

    async def read_all(self, parent_id: int) -> Dict[str, str]:
        if not self.is_available:
            return {}
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT meta_key, meta_value FROM product_stock_meta WHERE parent_id=$1",
                    parent_id
                )
                return {r["meta_key"]: r["meta_value"] for r in rows}
        except Exception as e:
            logger.error(f"Failed to read stock cache for product {parent_id}: {e}")
            return {}


def create_stock_store(backend: Optional[str] = None) -> StockStore:
    """Build the stock store selected by STORAGE_BACKEND."""
    backend = (backend or config.STORAGE_BACKEND).lower()
    if backend == "redis":
        return RedisStockStore()
    if backend == "postgres":
        return PostgresStockStore()
    raise ConfigError(f"Unknown STORAGE_BACKEND: {backend!r}")
