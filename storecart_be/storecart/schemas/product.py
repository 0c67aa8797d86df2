from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class SizeQuantity(BaseModel):
    size: str = Field(min_length=1, max_length=50)
    quantity: int = Field(ge=0)


class ProductBase(BaseModel):
    title: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    category: Optional[str] = None
    # Ignored when size_quantities is non-empty: stock becomes the per-size sum
    stock: int = Field(default=0, ge=0)
    rating: Optional[float] = 0.0
    discount: Optional[int] = 0
    main_image: Optional[str] = None
    images: Optional[List[str]] = None
    size_quantities: Optional[List[SizeQuantity]] = None

    @field_validator("size_quantities")
    @classmethod
    def unique_sizes(cls, value):
        if value:
            labels = [entry.size for entry in value]
            duplicates = sorted({label for label in labels if labels.count(label) > 1})
            if duplicates:
                raise ValueError(f"Duplicate size labels: {', '.join(duplicates)}")
        return value


class ProductCreate(ProductBase):
    pass


class ProductUpdate(ProductBase):
    pass


class ProductOut(ProductBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
