from dataclasses import dataclass
from typing import Any, NamedTuple, Optional


def normalize_size(size: Any) -> Optional[str]:
    """Collapse an absent or empty size onto the single "no size" value (None).

    Real labels are kept verbatim (no trimming, no case folding) because size
    availability is looked up in the catalog by the exact stored label.
    """
    if size is None:
        return None
    label = str(size)
    return label if label != "" else None


class CartLineKey(NamedTuple):
    product_id: int
    size: Optional[str]

    @property
    def sort_key(self):
        # Unsized lines sort ahead of sized lines of the same product
        return (self.product_id, self.size is not None, self.size or "")

    def describe(self) -> str:
        return f"product {self.product_id}" + (f" (size {self.size})" if self.size is not None else "")


def identity(product_id: int, size: Any = None) -> CartLineKey:
    return CartLineKey(product_id, normalize_size(size))


@dataclass
class CartLine:
    """One persisted cart entry: identity plus quantity, nothing else."""

    product_id: int
    size: Optional[str]
    quantity: int

    def __post_init__(self):
        self.size = normalize_size(self.size)

    @property
    def key(self) -> CartLineKey:
        return CartLineKey(self.product_id, self.size)


def find_line(lines, key: CartLineKey) -> Optional[CartLine]:
    for line in lines:
        if line.key == key:
            return line
    return None
