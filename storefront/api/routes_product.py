from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from storefront.core.cache import cache
from storefront.core.config import settings
from storefront.crud import product as crud_product
from storefront.db.deps import get_db
from storefront.schemas.product import ProductOut

router = APIRouter()

@router.get("/", response_model=List[ProductOut])
def list_products(
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Catalog listing, newest first, optionally filtered by category"""
    cache_key = f"products:{category or 'all'}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    products = [
        ProductOut.model_validate(p).model_dump(mode="json")
        for p in crud_product.list_products(db, category)
    ]
    cache.set(cache_key, products, ttl=settings.CATALOG_CACHE_TTL_SECONDS)
    return products

@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return crud_product.require_product(db, product_id)
