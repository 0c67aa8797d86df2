import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from storecart.models.product import Product
from storecart.models.user import User, get_db
from storecart.schemas.product import ProductCreate, ProductOut, ProductUpdate
from storecart.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

# Helpers

def to_product_out(p: Product) -> ProductOut:
    return ProductOut(
        id=p.id,
        title=p.title,
        description=p.description,
        price=float(p.price or 0),
        category=p.category,
        stock=p.stock or 0,
        rating=p.rating,
        discount=p.discount,
        main_image=p.main_image,
        images=p.images or [],
        size_quantities=p.size_quantities or None,
    )


def _apply_payload(product: Product, payload: ProductCreate) -> None:
    """Copy payload onto the row, keeping aggregate stock equal to the per-size sum."""
    sizes = [entry.model_dump() for entry in (payload.size_quantities or [])]
    product.title = payload.title
    product.description = payload.description
    product.price = payload.price
    product.category = payload.category
    product.rating = payload.rating
    product.discount = payload.discount
    product.main_image = payload.main_image
    product.images = payload.images or []
    product.size_quantities = sizes or None
    if sizes:
        derived = sum(entry["quantity"] for entry in sizes)
        if payload.stock and payload.stock != derived:
            logger.info(
                "Product %r: stock %s replaced by per-size total %s", payload.title, payload.stock, derived
            )
        product.stock = derived
    else:
        product.stock = payload.stock


# Get All Products (with filters)
@router.get("/", response_model=List[ProductOut])
def get_all_products(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1),
    category: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List products with optional case-insensitive category and title search."""
    query = db.query(Product)
    if category:
        query = query.filter(Product.category.ilike(category.strip()))
    if search:
        query = query.filter(Product.title.ilike(f"%{search}%"))
    products = query.order_by(Product.id).offset(page * size).limit(size).all()
    return [to_product_out(p) for p in products]


# Get Product by ID
@router.get("/{id}", response_model=ProductOut)
def get_product_by_id(id: int, db: Session = Depends(get_db)):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return to_product_out(product)


# Create Product (Admin)
@router.post("/admin", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    product = Product()
    _apply_payload(product, payload)
    db.add(product)
    db.commit()
    db.refresh(product)
    return to_product_out(product)


# Update Product (Admin)
@router.put("/admin/{id}", response_model=ProductOut)
def update_product(
    id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    _apply_payload(product, payload)
    db.commit()
    db.refresh(product)
    return to_product_out(product)


# Delete Product (Admin). Cart lines pointing at it are dropped on the next sync.
@router.delete("/admin/{id}")
def delete_product(id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    product = db.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    db.delete(product)
    db.commit()
    return {"message": "Product deleted"}
