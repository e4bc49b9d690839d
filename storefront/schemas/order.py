from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from storefront.models.order import OrderStatus

class ShippingDetails(BaseModel):
    # Presence is checked by the order materializer (InvalidShippingDetails)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None

class ShippingAddressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    address: str
    city: str
    postal_code: str

class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: Optional[str] = None
    product_image: Optional[str] = None
    price: Decimal
    quantity: int
    size: str

class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    items: List[OrderItemOut]
    shipping_address: ShippingAddressOut

    # Filled in when the caller asks for a language/currency
    display_total: Optional[str] = None
    status_label: Optional[str] = None
