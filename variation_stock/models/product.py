"""
Canonical internal data contract.
The webhook adapter, catalog and stock sync all speak these shapes.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict


# An attribute name (e.g. "attribute_pa_size") mapped to its value ("M").
AttributeSet = Dict[str, str]


class StockStatus:
    """Stock status tokens used by the commerce platform."""
    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"
    ON_BACKORDER = "onbackorder"

    ALL = (IN_STOCK, OUT_OF_STOCK, ON_BACKORDER)


@dataclass(frozen=True)
class Product:
    """
    A catalog product. Parent ("variable") products own the stock
    cache; their children are variation ids.
    """
    id: int
    type: str
    stock_status: str
    children: List[int] = field(default_factory=list)

    @property
    def is_parent(self) -> bool:
        return self.type == "variable"

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "type": self.type,
            "stock_status": self.stock_status,
            "children": list(self.children)
        }


@dataclass(frozen=True)
class Variation:
    """A single purchasable variation of a parent product."""
    id: int
    parent_id: Optional[int]
    stock_status: str
    attributes: AttributeSet = field(default_factory=dict)

    @property
    def is_orphan(self) -> bool:
        return not self.parent_id

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "stock_status": self.stock_status,
            "attributes": dict(self.attributes)
        }
