from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from decimal import Decimal
from storefront.schemas.product import ProductSummary

# Quantities and sizes are validated by the cart store so that every caller
# gets the same InvalidInput error, not only HTTP clients.
class CartItemCreate(BaseModel):
    product_id: int
    quantity: int = 1
    size: str

class CartItemUpdate(BaseModel):
    quantity: int

class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    size: str
    product: ProductSummary

class CartOut(BaseModel):
    id: Optional[int] = None
    items: List[CartItemOut] = []
    total: Decimal = Decimal("0")
    item_count: int = 0
