import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from variation_stock.config import config
from variation_stock.readiness import ReadinessManager
from variation_stock.sentry import _enrich_sentry_event, capture_write_failure


@pytest.mark.asyncio
async def test_readiness_initializes_backends():
    store = MagicMock(is_available=True)
    store.initialize = AsyncMock()
    catalog = MagicMock(is_available=False)
    catalog.initialize = AsyncMock()

    manager = ReadinessManager()
    await manager.initialize_services(store, catalog)

    store.initialize.assert_awaited_once()
    catalog.initialize.assert_awaited_once()
    assert manager.is_ready
    assert manager.is_service_available("store")
    assert not manager.is_service_available("catalog")


@pytest.mark.asyncio
async def test_readiness_survives_backend_errors():
    store = MagicMock()
    store.initialize = AsyncMock(side_effect=RuntimeError("boom"))
    catalog = MagicMock(is_available=True)
    catalog.initialize = AsyncMock()

    manager = ReadinessManager()
    await manager.initialize_services(store, catalog)

    status = manager.get_status()
    assert status["ready"] is True
    assert status["services"]["store"] is False
    assert status["services"]["catalog"] is True


def test_capture_write_failure_without_sentry():
    with patch.object(config, "SENTRY_DSN", ""), \
         patch("variation_stock.sentry.sentry_sdk.capture_message") as capture:
        capture_write_failure(10, "k", "READONLY")

    capture.assert_not_called()


def test_capture_write_failure_with_sentry():
    with patch.object(config, "SENTRY_DSN", "https://key@sentry.test/1"), \
         patch("variation_stock.sentry.sentry_sdk.push_scope"), \
         patch("variation_stock.sentry.sentry_sdk.capture_message") as capture:
        capture_write_failure(10, "k", "READONLY")

    capture.assert_called_once()
    assert "10" in capture.call_args[0][0]


def test_enrich_sentry_event():
    event = {"exception": {"values": [{"type": "ConnectionError", "module": "redis"}]}}

    enriched = _enrich_sentry_event(event, {})

    assert enriched["tags"]["system"] == "variation-stock-cache"
    assert enriched["fingerprint"][1:] == ["ConnectionError", "redis"]


def test_stock_sync_shares_the_service_instances():
    from variation_stock import services

    assert services.stock_sync.key_deriver is services.key_deriver
    assert services.stock_sync.catalog is services.catalog
    assert services.stock_sync.store is services.stock_store


@pytest.mark.asyncio
async def test_lifespan_initializes_and_closes_backends():
    from variation_stock import main

    with patch.object(main, "initialize_sentry"), \
         patch.object(main.readiness_manager, "initialize_services", new=AsyncMock()) as initialize, \
         patch.object(main.catalog, "close", new=AsyncMock()) as close_catalog, \
         patch.object(main.stock_store, "close", new=AsyncMock()) as close_store:
        async with main.lifespan(main.app):
            initialize.assert_awaited_once_with(main.stock_store, main.catalog)

    close_catalog.assert_awaited_once()
    close_store.assert_awaited_once()
