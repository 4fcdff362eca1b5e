"""
Explicit normalization layer.
Converts WooCommerce REST (v3) product and variation payloads into the internal model.
"""
import re
import unicodedata
from typing import List, Dict, Any

from variation_stock.errors import NormalizationError
from variation_stock.models.product import AttributeSet, Product, Variation


class WooCommerceNormalizer:
    """
    Normalizes raw WooCommerce payloads.
    Webhook bodies and REST responses share the same product shape.
    """

    @staticmethod
    def is_variation(raw: Dict[str, Any]) -> bool:
        return raw.get("type") == "variation"

    @staticmethod
    def normalize_product(raw: Dict[str, Any]) -> Product:
        """
        Convert a product payload to a Product.

        Raises:
            NormalizationError: If the payload has no usable id
        """
        product_id = WooCommerceNormalizer._normalize_id(raw.get("id"))
        if not product_id:
            raise NormalizationError(f"Product payload has no id. Data keys: {list(raw.keys())}")

        return Product(
            id=product_id,
            type=str(raw.get("type") or "simple"),
            stock_status=str(raw.get("stock_status") or ""),
            children=WooCommerceNormalizer._normalize_children(raw.get("variations"))
        )

    @staticmethod
    def normalize_variation(raw: Dict[str, Any]) -> Variation:
        """
        Convert a variation payload to a Variation.

        Expected fields:
        - id, parent_id, stock_status
        - attributes: [{"id": 1, "name": "Size", "slug": "pa_size", "option": "M"}, ...]

        Raises:
            NormalizationError: If the payload has no usable id
        """
        variation_id = WooCommerceNormalizer._normalize_id(raw.get("id"))
        if not variation_id:
            raise NormalizationError(f"Variation payload has no id. Data keys: {list(raw.keys())}")

        return Variation(
            id=variation_id,
            parent_id=WooCommerceNormalizer._normalize_id(raw.get("parent_id")),
            stock_status=str(raw.get("stock_status") or ""),
            attributes=WooCommerceNormalizer.normalize_attributes(raw.get("attributes") or [])
        )

    @staticmethod
    def normalize_attributes(raw_attributes: List[Dict[str, Any]]) -> AttributeSet:
        """
        Map REST attributes to platform attribute names.

        Global attributes (id > 0) live in a "pa_" taxonomy, custom ones use
        their sanitized name. A missing option is kept as "" (any value).

        REST returns the term name for global attributes ("Extra Large") while
        the platform stores the term slug ("extra-large"), so "pa_" options are
        slugged. Custom attribute options are stored verbatim.
        """
        attributes = {}

        for raw in raw_attributes:
            if not isinstance(raw, dict):
                continue

            taxonomy = WooCommerceNormalizer._attribute_taxonomy(raw)
            if not taxonomy:
                continue

            option = "" if raw.get("option") is None else str(raw.get("option"))
            if taxonomy.startswith("pa_"):
                option = WooCommerceNormalizer._sanitize_title(option)
            attributes[f"attribute_{taxonomy}"] = option

        return attributes

    @staticmethod
    def _attribute_taxonomy(raw: Dict[str, Any]) -> str:
        slug = str(raw.get("slug") or "").strip()
        if slug:
            return slug

        name = WooCommerceNormalizer._sanitize_title(str(raw.get("name") or ""))
        if not name:
            return ""

        try:
            is_global = int(raw.get("id") or 0) > 0
        except (ValueError, TypeError):
            is_global = False

        return f"pa_{name}" if is_global else name

    @staticmethod
    def _sanitize_title(name: str) -> str:
        """Accents folded, lower-case, whitespace and dots to dashes, drop anything else unsafe."""
        name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
        name = name.strip().lower()
        name = re.sub(r"[\s.]+", "-", name)
        name = re.sub(r"[^a-z0-9_\-]", "", name)
        return re.sub(r"-+", "-", name).strip("-")

    @staticmethod
    def _normalize_id(raw_id: Any) -> int:
        if raw_id is None or raw_id == "":
            return 0
        try:
            return int(raw_id)
        except (ValueError, TypeError):
            raise NormalizationError(f"Invalid id: {raw_id!r}")

    @staticmethod
    def _normalize_children(raw_children: Any) -> List[int]:
        if not isinstance(raw_children, list):
            return []

        children = []
        for child in raw_children:
            # Some endpoints embed full variation objects instead of ids
            if isinstance(child, dict):
                child = child.get("id")
            try:
                child_id = int(child)
            except (ValueError, TypeError):
                continue
            if child_id:
                children.append(child_id)

        return children
