import logging
from typing import Any, Callable, List, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storecart.config import get_settings
from storecart.schemas.cart import CartItemOut
from storecart.services.cart_identity import CartLine, find_line, identity
from storecart.services.cart_repository import CartRepository
from storecart.services.cart_validator import (
    Accepted,
    CartLineRejected,
    LineRequest,
    RejectReason,
    parse_quantity,
    validate,
)
from storecart.services.diagnostics import ValidationDiagnostic, quantity_adjusted
from storecart.services.inventory import InventoryView
from storecart.services.locks import cart_mutation_lock

logger = logging.getLogger(__name__)

# Mutates the loaded lines in place and returns diagnostics for the caller
CartMutation = Callable[[List[CartLine], InventoryView], Optional[List[ValidationDiagnostic]]]


class CartResult(NamedTuple):
    items: List[CartItemOut]
    diagnostics: List[ValidationDiagnostic]


def hydrate(lines: List[CartLine], inventory: InventoryView) -> List[CartItemOut]:
    """Join stored lines with live catalog fields.

    Lines whose product has left the catalog are skipped (and logged); they stay
    stored until the next mutation or sync rewrites the cart.
    """
    placeholder = get_settings().PLACEHOLDER_IMAGE_URL
    items: List[CartItemOut] = []
    for line in lines:
        product = inventory.product(line.product_id)
        if product is None:
            logger.warning("Cart line references missing product %s (size=%s)", line.product_id, line.size)
            continue
        images = list(product.images or [])
        items.append(
            CartItemOut(
                id=product.id,
                name=product.title or "Product Name Unavailable",
                price=float(product.price or 0),
                image=product.main_image or (images[0] if images else placeholder),
                images=images,
                countInStock=inventory.available_for(line.product_id, line.size),
                quantity=line.quantity,
                size=line.size,
            )
        )
    return items


def _accept(request: LineRequest, inventory: InventoryView) -> int:
    verdict = validate(request, inventory)
    if not isinstance(verdict, Accepted):
        logger.debug("Rejected %s: %s", request.key.describe(), verdict.reason.value)
        raise CartLineRejected.from_verdict(verdict, request)
    return verdict.quantity


class CartStore:
    """The authoritative cart of one user.

    Each mutation is one read-modify-write under the user's cart lock: load the
    lines, validate against a fresh inventory view, write the result, commit.
    Rejections leave the stored cart untouched.
    """

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id
        self.repository = CartRepository(db)

    def get(self) -> CartResult:
        inventory = InventoryView(self.db)
        lines = self.repository.load_lines(self.user_id)
        return CartResult(hydrate(lines, inventory), [])

    def mutate(self, mutation: CartMutation) -> CartResult:
        with cart_mutation_lock(self.user_id):
            inventory = InventoryView(self.db)
            try:
                lines = self.repository.load_lines(self.user_id, for_update=True)
                diagnostics = mutation(lines, inventory) or []
                self.repository.save_lines(self.user_id, lines)
                items = hydrate(lines, inventory)
                self.db.commit()
            except CartLineRejected:
                self.db.rollback()
                raise
            except SQLAlchemyError:
                self.db.rollback()
                logger.error("Cart write failed for user %s", self.user_id, exc_info=True)
                raise
        return CartResult(items, diagnostics)

    def add(self, product_id: int, size: Any = None, quantity: Any = 1) -> CartResult:
        request = LineRequest(product_id, size, quantity)

        def apply(lines, inventory):
            accepted = _accept(request, inventory)
            asked = parse_quantity(request.quantity)
            existing = find_line(lines, request.key)
            if existing is None:
                lines.append(CartLine(product_id, request.size, accepted))
                kept, wanted = accepted, asked
            else:
                # Re-check the combined line so it never exceeds current stock
                wanted = existing.quantity + asked
                kept = _accept(LineRequest(product_id, request.size, wanted), inventory)
                existing.quantity = kept
            if kept < wanted:
                return [quantity_adjusted(product_id, request.size, kept, inventory.product_name(product_id))]
            return []

        return self.mutate(apply)

    def update(self, product_id: int, size: Any = None, quantity: Any = None) -> CartResult:
        request = LineRequest(product_id, size, quantity)

        def apply(lines, inventory):
            accepted = _accept(request, inventory)
            line = find_line(lines, request.key)
            if line is None:
                raise CartLineRejected(
                    RejectReason.NOT_FOUND_IN_CART,
                    "Product not found in cart with specified size",
                    product_id,
                    request.size,
                )
            line.quantity = accepted
            if accepted < parse_quantity(request.quantity):
                return [quantity_adjusted(product_id, request.size, accepted, inventory.product_name(product_id))]
            return []

        return self.mutate(apply)

    def remove(self, product_id: int, size: Any = None) -> CartResult:
        key = identity(product_id, size)

        def apply(lines, inventory):
            lines[:] = [line for line in lines if line.key != key]

        return self.mutate(apply)

    def clear(self) -> CartResult:
        def apply(lines, inventory):
            lines.clear()

        return self.mutate(apply)

    def replace(self, new_lines: List[CartLine]) -> CartResult:
        def apply(lines, inventory):
            lines[:] = list(new_lines)

        return self.mutate(apply)
