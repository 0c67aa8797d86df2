from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from storecart.models.user import User, get_db
from storecart.schemas.cart import (
    CartItemIn,
    CartItemUpdate,
    CartOut,
    CartSyncIn,
    ValidationMessageOut,
)
from storecart.services.cart_reconciler import CartReconciler
from storecart.services.cart_store import CartResult, CartStore
from storecart.services.cart_validator import LineRequest
from storecart.services.diagnostics import ValidationDiagnostic
from storecart.utils.security import get_current_user


router = APIRouter()


def _serialize_messages(diagnostics: List[ValidationDiagnostic]) -> List[ValidationMessageOut]:
    return [
        ValidationMessageOut(
            productId=d.product_id,
            type=d.kind.value,
            message=d.message,
            name=d.name,
            size=d.size,
            quantity=d.quantity,
        )
        for d in diagnostics
    ]


def _serialize_cart(result: CartResult) -> CartOut:
    # validationMessages is left unset (and so omitted) when there is nothing to report
    if result.diagnostics:
        return CartOut(cartItems=result.items, validationMessages=_serialize_messages(result.diagnostics))
    return CartOut(cartItems=result.items)


# Get Cart
@router.get("/", response_model=CartOut, response_model_exclude_unset=True)
def get_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _serialize_cart(CartStore(db, user.id).get())


# Add Cart Item (increments an existing line with the same product and size)
@router.post("/", response_model=CartOut, response_model_exclude_unset=True, status_code=201)
def add_cart_item(
    payload: CartItemIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = CartStore(db, user.id).add(payload.productId, payload.size, payload.quantity)
    return _serialize_cart(result)


# Sync local cart into the account (replaces the stored cart)
@router.post("/sync", response_model=CartOut, response_model_exclude_unset=True)
def sync_cart(
    payload: CartSyncIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entries = [LineRequest(i.id, i.size, i.quantity) for i in payload.cartItems]
    result = CartReconciler(CartStore(db, user.id)).sync(entries)
    return _serialize_cart(result)


# Set Cart Item Quantity
@router.put("/{product_id}", response_model=CartOut, response_model_exclude_unset=True)
def update_cart_item(
    product_id: int,
    payload: CartItemUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = CartStore(db, user.id).update(product_id, payload.size, payload.quantity)
    return _serialize_cart(result)


# Remove Cart Item (exact product + size; no size means the unsized line only)
@router.delete("/{product_id}", response_model=CartOut, response_model_exclude_unset=True)
def remove_cart_item(
    product_id: int,
    size: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _serialize_cart(CartStore(db, user.id).remove(product_id, size))


# Clear Cart
@router.delete("/", response_model=CartOut, response_model_exclude_unset=True)
def clear_cart(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _serialize_cart(CartStore(db, user.id).clear())
