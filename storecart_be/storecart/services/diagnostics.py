from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class DiagnosticKind(str, Enum):
    REMOVED_NONEXISTENT_PRODUCT = "removed-nonexistent-product"
    REMOVED_OUT_OF_STOCK = "removed-out-of-stock"
    REMOVED_INVALID_SIZE = "removed-invalid-size"
    REMOVED_INVALID_QUANTITY = "removed-invalid-quantity"
    QUANTITY_ADJUSTED = "quantity-adjusted"


@dataclass(frozen=True)
class ValidationDiagnostic:
    """Per-line note for the shopper. Shown once, never stored."""

    kind: DiagnosticKind
    product_id: Union[int, str]
    message: str
    size: Optional[str] = None
    name: Optional[str] = None
    # Only set for QUANTITY_ADJUSTED: the quantity actually kept
    quantity: Optional[int] = None


def quantity_adjusted(product_id: int, size: Optional[str], quantity: int, name: Optional[str] = None) -> ValidationDiagnostic:
    if size is not None:
        message = f"Quantity for size {size} adjusted to {quantity} due to stock limitations"
    else:
        message = f"Quantity adjusted to {quantity} due to stock limitations"
    return ValidationDiagnostic(
        kind=DiagnosticKind.QUANTITY_ADJUSTED,
        product_id=product_id,
        message=message,
        size=size,
        name=name,
        quantity=quantity,
    )
