"""
Platform event adapter.
Turns WooCommerce product webhooks into stock sync calls.
"""
import base64
import hashlib
import hmac
import json
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request

from variation_stock.config import config
from variation_stock.errors import ExternalServiceError, NormalizationError
from variation_stock.logger import logger
from variation_stock.normalizers.woocommerce import WooCommerceNormalizer
from variation_stock.services import stock_sync

router = APIRouter()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """WooCommerce signs the raw body: base64(HMAC-SHA256(secret, body))."""
    if not signature:
        return False
    expected = base64.b64encode(
        hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    ).decode("ascii")
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


@router.post("/webhooks/stock")
async def stock_webhook(
    request: Request,
    x_wc_webhook_signature: Optional[str] = Header(None)
):
    """Handle a product or variation update from the store."""
    body = await request.body()

    if config.WEBHOOK_SECRET and not verify_signature(body, x_wc_webhook_signature, config.WEBHOOK_SECRET):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        payload = json.loads(body)
    except ValueError:
        # Delivery pings are form encoded ("webhook_id=12")
        logger.info("Ignoring non-JSON webhook delivery")
        return {"success": True, "ignored": True}

    if not isinstance(payload, dict) or not payload.get("id"):
        return {"success": True, "ignored": True}

    try:
        if WooCommerceNormalizer.is_variation(payload):
            variation = WooCommerceNormalizer.normalize_variation(payload)
            written = await stock_sync.on_variation_status_changed(
                variation.id, variation.stock_status, variation
            )
        else:
            product = WooCommerceNormalizer.normalize_product(payload)
            written = await stock_sync.on_parent_status_changed(
                product.id, product.stock_status, product
            )

    except NormalizationError as e:
        logger.warning(f"Unusable webhook payload: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    except ExternalServiceError as e:
        logger.error(f"External service error: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")

    return {"success": True, "id": payload["id"], "keys_written": written}
