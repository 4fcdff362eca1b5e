"""
Test data contract stability.
Ensures internal model doesn't break.
"""
import dataclasses

import pytest

from variation_stock.models.product import Product, StockStatus, Variation


def test_product_contract():
    product = Product(id=10, type="variable", stock_status=StockStatus.IN_STOCK, children=[11, 12])

    assert product.is_parent
    assert product.to_dict() == {
        "id": 10,
        "type": "variable",
        "stock_status": "instock",
        "children": [11, 12]
    }


def test_variation_contract():
    variation = Variation(
        id=11,
        parent_id=10,
        stock_status=StockStatus.ON_BACKORDER,
        attributes={"attribute_pa_size": "M"}
    )

    assert not variation.is_orphan
    assert variation.to_dict()["attributes"] == {"attribute_pa_size": "M"}


def test_models_are_immutable():
    variation = Variation(id=11, parent_id=10, stock_status="instock")

    with pytest.raises(dataclasses.FrozenInstanceError):
        variation.stock_status = "outofstock"


def test_stock_status_tokens():
    assert StockStatus.ALL == ("instock", "outofstock", "onbackorder")
