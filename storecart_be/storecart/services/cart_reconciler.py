"""Adopt a client-held cart snapshot (e.g. from local storage) as the user's cart.

Each snapshot entry is validated on its own against current inventory and
ends up either as a kept line or as a diagnostic explaining why it was
dropped; one bad entry never blocks the others. The reconciled lines then
replace the stored cart wholesale. This is an overwrite, not a merge with
whatever the server already held, because it runs once when an anonymous
cart is taken over by a signed-in session.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from storecart.services.cart_identity import CartLine, CartLineKey
from storecart.services.cart_store import CartResult, CartStore
from storecart.services.cart_validator import (
    Accepted,
    LineRequest,
    RejectReason,
    parse_quantity,
    validate,
)
from storecart.services.diagnostics import DiagnosticKind, ValidationDiagnostic, quantity_adjusted

logger = logging.getLogger(__name__)

_REMOVAL_KINDS = {
    RejectReason.PRODUCT_NOT_FOUND: DiagnosticKind.REMOVED_NONEXISTENT_PRODUCT,
    RejectReason.OUT_OF_STOCK: DiagnosticKind.REMOVED_OUT_OF_STOCK,
    RejectReason.SIZE_UNAVAILABLE: DiagnosticKind.REMOVED_OUT_OF_STOCK,
    RejectReason.SIZE_REQUIRED: DiagnosticKind.REMOVED_INVALID_SIZE,
    RejectReason.SIZE_NOT_APPLICABLE: DiagnosticKind.REMOVED_INVALID_SIZE,
    RejectReason.INVALID_QUANTITY: DiagnosticKind.REMOVED_INVALID_QUANTITY,
}


@dataclass
class Reconciliation:
    final_lines: List[CartLine] = field(default_factory=list)
    diagnostics: List[ValidationDiagnostic] = field(default_factory=list)


def merge_snapshot(entries: Iterable[LineRequest]) -> List[LineRequest]:
    """Fold entries sharing an identity into one by summing quantities.

    Keeps first-seen order. Entries with unusable quantities are passed through
    untouched so reconciliation reports them.
    """
    merged: Dict[CartLineKey, LineRequest] = {}
    order: List = []
    for entry in entries:
        qty = parse_quantity(entry.quantity)
        if qty is None:
            order.append(entry)
            continue
        previous = merged.get(entry.key)
        if previous is None:
            merged[entry.key] = LineRequest(entry.product_id, entry.size, qty)
            order.append(entry.key)
        else:
            merged[entry.key] = LineRequest(entry.product_id, entry.size, previous.quantity + qty)
    return [merged[item] if isinstance(item, CartLineKey) else item for item in order]


def reconcile(snapshot: Iterable[LineRequest], inventory) -> Reconciliation:
    result = Reconciliation()
    for entry in snapshot:
        verdict = validate(entry, inventory)
        if isinstance(verdict, Accepted):
            result.final_lines.append(CartLine(entry.product_id, entry.size, verdict.quantity))
            if verdict.quantity < parse_quantity(entry.quantity):
                result.diagnostics.append(
                    quantity_adjusted(entry.product_id, entry.size, verdict.quantity, inventory.product_name(entry.product_id))
                )
            continue

        kind = _REMOVAL_KINDS[verdict.reason]
        message = "Product no longer exists" if kind is DiagnosticKind.REMOVED_NONEXISTENT_PRODUCT else verdict.message
        result.diagnostics.append(
            ValidationDiagnostic(
                kind=kind,
                product_id=entry.product_id,
                message=message,
                size=entry.size,
                name=inventory.product_name(entry.product_id),
            )
        )
    return result


class CartReconciler:
    def __init__(self, store: CartStore):
        self.store = store

    def sync(self, entries: Iterable[LineRequest]) -> CartResult:
        snapshot = merge_snapshot(entries)

        def apply(lines, inventory):
            outcome = reconcile(snapshot, inventory)
            lines[:] = outcome.final_lines
            return outcome.diagnostics

        result = self.store.mutate(apply)
        logger.info(
            "Synced cart for user %s: %d entries in, %d lines kept, %d diagnostics",
            self.store.user_id,
            len(snapshot),
            len(result.items),
            len(result.diagnostics),
        )
        return result
