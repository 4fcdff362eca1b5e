"""
WooCommerceCatalog tests with mocked HTTP.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from variation_stock.catalog.woocommerce import WooCommerceCatalog
from variation_stock.config import config
from variation_stock.errors import CatalogError, ExternalServiceError, RetryExhaustedError


@pytest.fixture
def woo_config():
    """Point the catalog at a fake store."""
    with patch.object(config, 'WOOCOMMERCE_URL', 'https://shop.test'), \
         patch.object(config, 'WOOCOMMERCE_CONSUMER_KEY', 'ck_test'), \
         patch.object(config, 'WOOCOMMERCE_CONSUMER_SECRET', 'cs_test'), \
         patch.object(config, 'RETRY_BACKOFF', 0.0):
        yield


def make_response(status=200, payload=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload)
    response.text = AsyncMock(return_value=text)
    return response


def make_catalog(*responses):
    catalog = WooCommerceCatalog()
    catalog.session = MagicMock()
    catalog.session.get = AsyncMock(side_effect=list(responses))
    return catalog


VARIATION_PAYLOAD = {
    "id": 733,
    "parent_id": 732,
    "type": "variation",
    "stock_status": "outofstock",
    "attributes": [{"id": 1, "name": "Size", "slug": "pa_size", "option": "M"}]
}


def test_catalog_not_configured():
    with patch.object(config, 'WOOCOMMERCE_URL', ''):
        catalog = WooCommerceCatalog()

    assert catalog.is_available is False


@pytest.mark.asyncio
async def test_initialize_session(woo_config):
    catalog = WooCommerceCatalog()

    with patch('aiohttp.ClientSession') as mock_session_class:
        await catalog.initialize()

        assert catalog.session is not None
        mock_session_class.assert_called_once()


@pytest.mark.asyncio
async def test_get_variation(woo_config):
    catalog = make_catalog(make_response(payload=VARIATION_PAYLOAD))

    variation = await catalog.get_variation(733)

    assert variation.parent_id == 732
    assert variation.stock_status == "outofstock"
    assert variation.attributes == {"attribute_pa_size": "m"}
    assert catalog.session.get.call_args[0][0] == "https://shop.test/wp-json/wc/v3/products/733"


@pytest.mark.asyncio
async def test_get_variation_not_found(woo_config):
    catalog = make_catalog(make_response(status=404))

    assert await catalog.get_variation(999) is None


@pytest.mark.asyncio
async def test_get_variation_of_plain_product(woo_config):
    catalog = make_catalog(make_response(payload={"id": 12, "type": "simple"}))

    assert await catalog.get_variation(12) is None


@pytest.mark.asyncio
async def test_get_variation_with_unusable_payload(woo_config):
    catalog = make_catalog(make_response(payload={"id": "bad", "type": "variation"}))

    with pytest.raises(CatalogError):
        await catalog.get_variation(12)


@pytest.mark.asyncio
async def test_api_error(woo_config):
    catalog = make_catalog(make_response(status=500, text="Internal error"))

    with pytest.raises(ExternalServiceError, match="500"):
        await catalog.get_variation(733)


@pytest.mark.asyncio
async def test_network_error_is_retried(woo_config):
    catalog = make_catalog(
        aiohttp.ClientConnectionError("reset"),
        make_response(payload=VARIATION_PAYLOAD)
    )

    with patch('variation_stock.utils.retry.asyncio.sleep', new=AsyncMock()):
        variation = await catalog.get_variation(733)

    assert variation.id == 733
    assert catalog.session.get.await_count == 2


@pytest.mark.asyncio
async def test_network_error_exhausts_retries(woo_config):
    with patch.object(config, 'MAX_RETRIES', 2):
        catalog = make_catalog(*[aiohttp.ClientConnectionError("down")] * 3)

        with patch('variation_stock.utils.retry.asyncio.sleep', new=AsyncMock()):
            with pytest.raises(RetryExhaustedError):
                await catalog.get_variation(733)

    assert catalog.session.get.await_count == 3


@pytest.mark.asyncio
async def test_unconfigured_catalog_raises(woo_config):
    catalog = WooCommerceCatalog()

    with pytest.raises(ExternalServiceError):
        await catalog.get_variation(1)


@pytest.mark.asyncio
async def test_iter_parent_products_walks_pages(woo_config):
    catalog = make_catalog(
        make_response(payload=[
            {"id": 1, "type": "variable", "stock_status": "instock", "variations": [2]},
            {"id": 3, "type": "variable", "stock_status": "outofstock", "variations": [4]}
        ]),
        make_response(payload=[
            {"id": 5, "type": "variable", "stock_status": "instock", "variations": []}
        ])
    )
    catalog.page_size = 2

    products = [product async for product in catalog.iter_parent_products()]

    assert [p.id for p in products] == [1, 3, 5]
    first_params = catalog.session.get.call_args_list[0][1]["params"]
    assert first_params["type"] == "variable"
    assert first_params["status"] == "any"
    assert catalog.session.get.call_args_list[1][1]["params"]["page"] == 2


@pytest.mark.asyncio
async def test_iter_parent_products_invalid_response(woo_config):
    catalog = make_catalog(make_response(payload={"code": "woocommerce_rest_cannot_view"}))

    with pytest.raises(CatalogError):
        async for _ in catalog.iter_parent_products():
            pass
