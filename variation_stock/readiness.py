"""
Startup readiness and health checks.
Application starts without its backends, recovers after.
"""
import time
from typing import Dict, Any

from variation_stock.logger import logger


class ReadinessManager:
    """
    Manages application readiness state.
    Startup succeeds even when the store or the catalog is unreachable.
    """

    def __init__(self):
        self.is_ready = False
        self.services: Dict[str, bool] = {
            "config": True,  # Config validation happens at startup
            "store": False,
            "catalog": False
        }
        self.startup_time = None

    async def initialize_services(self, store, catalog):
        """
        Initialize backends after startup.
        Failures don't prevent startup.
        """
        logger.info("Starting service initialization...")

        try:
            await store.initialize()
            self.services["store"] = store.is_available
        except Exception as e:
            logger.warning(f"Stock store initialization failed: {e}")

        try:
            await catalog.initialize()
            self.services["catalog"] = catalog.is_available
        except Exception as e:
            logger.warning(f"Catalog initialization failed: {e}")

        self.is_ready = True
        self.startup_time = time.monotonic()

        logger.info(f"Services initialized. Ready: {self.is_ready}")
        logger.info(f"Service status: {self.services}")

    def get_status(self) -> Dict[str, Any]:
        """Get readiness status."""
        return {
            "ready": self.is_ready,
            "services": self.services,
            "uptime": time.monotonic() - self.startup_time if self.startup_time else 0
        }

    def is_service_available(self, service_name: str) -> bool:
        return self.services.get(service_name, False)


# Global readiness manager
readiness_manager = ReadinessManager()
