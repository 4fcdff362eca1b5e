"""
Main application entry point.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Request

from variation_stock.config import config
from variation_stock.errors import ConfigError, ExternalServiceError
from variation_stock.health import router as health_router
from variation_stock.key_deriver import ATTRIBUTE_NAME_PREFIX
from variation_stock.logger import logger
from variation_stock.readiness import readiness_manager
from variation_stock.sentry import initialize_sentry
from variation_stock.services import catalog, key_deriver, stock_store, stock_sync


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info("Starting variation stock cache")

    initialize_sentry()

    try:
        config.validate()
    except ConfigError as e:
        logger.error(f"Configuration problem: {e}")
        readiness_manager.services["config"] = False

    await readiness_manager.initialize_services(stock_store, catalog)

    yield

    logger.info("Shutting down variation stock cache")
    await catalog.close()
    await stock_store.close()


app = FastAPI(
    title="Variation Stock Cache",
    description="Per-parent cache of variation stock status keyed by attribute combinations",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(health_router)

# With autoload off the service never subscribes to platform events.
if config.AUTOLOAD:
    from variation_stock.webhooks import router as webhook_router
    app.include_router(webhook_router)
else:
    logger.info("Autoload disabled, webhook routes not mounted")


def _require_admin(token: Optional[str]):
    if not config.ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Admin access is not configured")
    if not token or token != config.ADMIN_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid admin token")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Variation Stock Cache",
        "version": "1.0.0",
        "status": "operational",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/admin/stock-cache")
async def admin_stock_cache(
    prime: Optional[str] = None,
    x_admin_token: Optional[str] = Header(None)
):
    """Admin maintenance: pass ?prime=1 to rebuild the whole stock cache in this request."""
    _require_admin(x_admin_token)

    if prime is None:
        return {"primed": False, "key_prefix": key_deriver.key_prefix}

    try:
        processed = await stock_sync.prime_cache()
    except ExternalServiceError as e:
        logger.error(f"Stock cache priming failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")

    return {
        "primed": True,
        "products": processed,
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/api/v1/products/{parent_id}/stock")
async def get_stock_status(parent_id: int, request: Request):
    """
    Storefront lookup: the cached stock status of a parent's variations
    matching the attribute filters given as query parameters,
    e.g. ?attribute_pa_size=M&attribute_pa_color=red
    Other query parameters (paging, cache busters) are not part of the key.
    """
    filters = key_deriver.tracked({
        name: value for name, value in request.query_params.items()
        if name.startswith(ATTRIBUTE_NAME_PREFIX)
    })
    if not filters:
        raise HTTPException(status_code=400, detail="At least one attribute filter is required")

    key = key_deriver.derive_key(filters)
    stock_status = await stock_store.read(parent_id, key)

    return {
        "parent_id": parent_id,
        "key": key,
        "stock_status": stock_status,
        "cached": stock_status is not None
    }


@app.get("/api/v1/products/{parent_id}/stock-cache")
async def get_stock_cache(parent_id: int):
    """Every cached key and status stored on a parent product."""
    entries = await stock_store.read_all(parent_id)
    return {"parent_id": parent_id, "entries": entries, "count": len(entries)}


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
