"""Read-only view of catalog stock as the cart sees it.

A product is in exactly one of two inventory modes:

* ``Sized``: it has a non-empty size list; every size is an independent
  capacity and the aggregate stock figure is ignored.
* ``Unsized``: no size entries; the aggregate stock figure governs.

Products missing from the catalog read as ``NotFound``. Nothing here writes to
the catalog.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from sqlalchemy.orm import Session

from storecart.models.product import Product


@dataclass(frozen=True)
class NotFound:
    product_id: int


@dataclass(frozen=True)
class Unsized:
    total: int


@dataclass(frozen=True)
class Sized:
    # Insertion order follows the catalog's size list
    sizes: Dict[str, int] = field(default_factory=dict)


Availability = Union[NotFound, Unsized, Sized]


def _as_count(value) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def availability_of(product: Optional[Product], product_id: int) -> Availability:
    if product is None:
        return NotFound(product_id)
    entries = product.size_quantities or []
    if entries:
        sizes: Dict[str, int] = {}
        for entry in entries:
            sizes[str(entry.get("size"))] = _as_count(entry.get("quantity"))
        return Sized(sizes)
    return Unsized(_as_count(product.stock))


def available_quantity(availability: Availability, size: Optional[str]) -> int:
    """How many units of the (product, size) identity could be held right now."""
    if isinstance(availability, Sized):
        return availability.sizes.get(size, 0) if size is not None else 0
    if isinstance(availability, Unsized):
        return availability.total if size is None else 0
    return 0


class InventoryView:
    """Catalog snapshot for a single cart operation.

    Products are fetched lazily and memoized, so every lookup made while
    handling one request sees the same row. Build a new view per operation.
    """

    def __init__(self, db: Session):
        self.db = db
        self._products: Dict[int, Optional[Product]] = {}

    def product(self, product_id: int) -> Optional[Product]:
        if not isinstance(product_id, int):
            # Ids that never parsed as integers cannot name a catalog row
            return None
        if product_id not in self._products:
            self._products[product_id] = self.db.get(Product, product_id)
        return self._products[product_id]

    def availability(self, product_id: int) -> Availability:
        return availability_of(self.product(product_id), product_id)

    def available_for(self, product_id: int, size: Optional[str]) -> int:
        return available_quantity(self.availability(product_id), size)

    def product_name(self, product_id: int) -> Optional[str]:
        product = self.product(product_id)
        return product.title if product is not None else None
