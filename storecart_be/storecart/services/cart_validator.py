from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from storecart.services.cart_identity import CartLineKey, normalize_size
from storecart.services.inventory import NotFound, Sized, Unsized


class RejectReason(str, Enum):
    PRODUCT_NOT_FOUND = "product-not-found"
    SIZE_REQUIRED = "size-required"
    SIZE_UNAVAILABLE = "size-unavailable"
    SIZE_NOT_APPLICABLE = "size-not-applicable"
    OUT_OF_STOCK = "out-of-stock"
    INVALID_QUANTITY = "invalid-quantity"
    NOT_FOUND_IN_CART = "not-found-in-cart"


@dataclass(frozen=True)
class LineRequest:
    product_id: Union[int, str]
    size: Optional[str]
    quantity: Any

    def __post_init__(self):
        # Snapshot ids come from client storage; unusable ones are kept as text
        # so the entry can still be reported back
        product_id = parse_product_id(self.product_id)
        object.__setattr__(self, "product_id", product_id if product_id is not None else str(self.product_id))
        object.__setattr__(self, "size", normalize_size(self.size))

    @property
    def key(self) -> CartLineKey:
        return CartLineKey(self.product_id, self.size)


@dataclass(frozen=True)
class Accepted:
    quantity: int


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    message: str


Verdict = Union[Accepted, Rejected]


class CartLineRejected(Exception):
    """A cart mutation was refused for a user-correctable reason."""

    def __init__(self, reason: RejectReason, message: str, product_id: Optional[int] = None, size: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.product_id = product_id
        self.size = size

    @classmethod
    def from_verdict(cls, verdict: Rejected, request: LineRequest) -> "CartLineRejected":
        return cls(verdict.reason, verdict.message, request.product_id, request.size)


def parse_quantity(value: Any) -> Optional[int]:
    """Return ``value`` as a whole number >= 1, or None if it is not one.

    Accepts ints, digit strings and integral floats; booleans are refused.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        qty = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            return None
        qty = int(text)
    else:
        return None
    return qty if qty >= 1 else None


def parse_product_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


def validate(request: LineRequest, inventory) -> Verdict:
    """Check one requested line against current stock.

    Order matters: quantity shape, then product existence, then size shape,
    then size availability, and only then capping. Callers compare the
    accepted quantity with what they asked for to detect capping.
    """
    requested = parse_quantity(request.quantity)
    if requested is None:
        return Rejected(RejectReason.INVALID_QUANTITY, "Quantity must be a whole number of at least 1")

    availability = inventory.availability(request.product_id)
    if isinstance(availability, NotFound):
        return Rejected(RejectReason.PRODUCT_NOT_FOUND, "Product not found")

    size = request.size
    if isinstance(availability, Sized):
        if size is None:
            return Rejected(RejectReason.SIZE_REQUIRED, "Please select a size for this product")
        if size not in availability.sizes:
            return Rejected(RejectReason.SIZE_UNAVAILABLE, f"Size {size} is not available for this product")
        remaining = availability.sizes[size]
        if remaining <= 0:
            return Rejected(RejectReason.OUT_OF_STOCK, f"Size {size} is out of stock")
        return Accepted(min(requested, remaining))

    if isinstance(availability, Unsized):
        if size is not None:
            return Rejected(RejectReason.SIZE_NOT_APPLICABLE, f"This product is not sold in sizes (got size {size})")
        if availability.total <= 0:
            return Rejected(RejectReason.OUT_OF_STOCK, "Product is out of stock")
        return Accepted(min(requested, availability.total))

    raise TypeError(f"Unknown availability type: {availability!r}")
