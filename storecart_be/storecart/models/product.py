from sqlalchemy import Column, Integer, String, Float, Numeric, JSON
from sqlalchemy.dialects.postgresql import JSONB
from storecart.models.user import Base

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(1000))
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), index=True)
    # Aggregate stock; equals the per-size sum whenever size_quantities is non-empty
    stock = Column(Integer, default=0)
    rating = Column(Float, default=0.0)
    discount = Column(Integer, default=0)
    main_image = Column(String(255))
    images = Column(JSONType)  # List of URLs or paths
    # Optional ordered per-size inventory, e.g. [{"size": "S", "quantity": 3}, {"size": "M", "quantity": 0}]
    size_quantities = Column(JSONType)
