import logging

from fastapi.openapi.utils import get_openapi

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError, PersistenceError
from storefront.core.monitoring import monitoring
from storefront.db.session import engine, Base
from storefront.models import product, cart, order, checkout  # noqa: F401  register tables
from storefront.api.routes_product import router as product_router
from storefront.api.routes_cart import router as cart_router
from storefront.api.routes_checkout import router as checkout_router
from storefront.api.routes_order import router as order_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("storefront")


app = FastAPI(
    title="storefront-api",
    description="Catalog, cart, checkout and order history for the storefront",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if isinstance(exc, PersistenceError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=headers,
    )


app.include_router(
    product_router,
    prefix="/api/products",
    tags=["Product"],
)
app.include_router(
    cart_router,
    prefix="/api/cart",
    tags=["Cart"],
)
app.include_router(
    checkout_router,
    prefix="/api/checkout",
    tags=["Checkout"],
)
app.include_router(
    order_router,
    prefix="/api/orders",
    tags=["Order"],
)


@app.get("/api/health", tags=["Health"])
def health():
    return monitoring.get_health_status()


# 👇 Add custom OpenAPI with Bearer Auth
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="Storefront API",
        version="1.0.0",
        description="Cart, checkout and orders for authenticated shoppers.",
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT"
        }
    }
    for path_name, path in openapi_schema["paths"].items():
        if not (path_name.startswith("/api/cart") or path_name.startswith("/api/orders")
                or path_name == "/api/checkout/session"):
            continue
        for method in path.values():
            method["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
