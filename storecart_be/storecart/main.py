from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

from storecart.config import get_settings
from storecart.routers import auth, products
from storecart.routers import cart
from storecart.services.cart_validator import CartLineRejected, RejectReason

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger("storecart")

app = FastAPI()

# Rejections that mean "the thing you named does not exist" map to 404, the rest to 400
_NOT_FOUND_REASONS = {RejectReason.PRODUCT_NOT_FOUND, RejectReason.NOT_FOUND_IN_CART}


@app.on_event("startup")
def on_startup():
    # Ensure all DB tables exist after all models are imported
    from storecart.models.user import Base, engine  # Base/engine single source
    import storecart.models.product  # register Product model
    import storecart.models.cart  # register Cart/CartItem models
    Base.metadata.create_all(bind=engine)


@app.exception_handler(CartLineRejected)
def cart_line_rejected_handler(request: Request, exc: CartLineRejected):
    status_code = 404 if exc.reason in _NOT_FOUND_REASONS else 400
    body = {"detail": exc.message, "reason": exc.reason.value}
    if exc.product_id is not None:
        body["productId"] = exc.product_id
        body["size"] = exc.size
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(SQLAlchemyError)
def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Cart storage unavailable"})


# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])


# --- Entry point for local runs ---
if __name__ == "__main__":
    import uvicorn, os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("storecart.main:app", host="0.0.0.0", port=port, reload=False)
