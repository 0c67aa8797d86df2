import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storecart.models.cart import Cart, CartItem
from storecart.services.cart_identity import CartLine

logger = logging.getLogger(__name__)


class CartRepository:
    """Loads and stores a user's cart lines (identity + quantity only)."""

    def __init__(self, db: Session):
        self.db = db

    def _find_cart(self, user_id: int, for_update: bool = False) -> Optional[Cart]:
        query = self.db.query(Cart).filter(Cart.user_id == user_id)
        if for_update:
            # Row lock on Postgres; ignored by sqlite
            query = query.with_for_update()
        return query.first()

    def _get_or_create_cart(self, user_id: int) -> Cart:
        cart = self._find_cart(user_id, for_update=True)
        if cart:
            return cart
        cart = Cart(user_id=user_id)
        self.db.add(cart)
        try:
            self.db.flush()
        except IntegrityError:
            # Another worker created it first; callers lock the cart before reading lines,
            # so the rollback discards nothing but this insert
            self.db.rollback()
            logger.info("Cart for user %s created concurrently; reusing it", user_id)
            cart = self._find_cart(user_id, for_update=True)
        return cart

    def load_lines(self, user_id: int, for_update: bool = False) -> List[CartLine]:
        """Read the stored lines in order.

        With ``for_update`` the cart row is created if missing and locked first,
        so the lines returned are the ones a concurrent creator committed.
        """
        if for_update:
            cart = self._get_or_create_cart(user_id)
        else:
            cart = self._find_cart(user_id)
        if not cart:
            return []
        return [
            CartLine(product_id=i.product_id, size=i.selected_size, quantity=i.quantity)
            for i in cart.items
        ]

    def save_lines(self, user_id: int, lines: List[CartLine]) -> None:
        """Overwrite the stored lines with ``lines``, keeping their order.

        Flushes but does not commit; the caller owns the transaction.
        """
        cart = self._get_or_create_cart(user_id)
        cart.items.clear()
        # Deletes must hit the table before re-inserting rows with the same identity
        self.db.flush()
        for position, line in enumerate(lines):
            cart.items.append(
                CartItem(
                    product_id=line.product_id,
                    selected_size=line.size,
                    quantity=line.quantity,
                    position=position,
                )
            )
        self.db.flush()
