from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Union


# Quantities stay untyped here: the cart validator owns the "whole number >= 1"
# rule so bad input gets the invalid-quantity reason instead of a 422.
class CartItemIn(BaseModel):
    productId: int
    quantity: Any = 1
    size: Optional[str] = None


class CartItemUpdate(BaseModel):
    quantity: Any = None
    size: Optional[str] = None


class CartSyncItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Ids and sizes come straight from client storage and are checked per entry
    id: Any = Field(default=None, alias="_id")
    quantity: Any = 1
    size: Any = None


class CartSyncIn(BaseModel):
    cartItems: List[CartSyncItem]


class CartItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(alias="_id")
    name: str
    price: float
    image: str
    images: List[str] = []
    countInStock: int
    quantity: int
    size: Optional[str] = None


class ValidationMessageOut(BaseModel):
    productId: Union[int, str]
    type: str
    message: str
    name: Optional[str] = None
    size: Optional[str] = None
    quantity: Optional[int] = None


class CartOut(BaseModel):
    cartItems: List[CartItemOut]
    validationMessages: Optional[List[ValidationMessageOut]] = None
