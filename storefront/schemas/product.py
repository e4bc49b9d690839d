from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

# 👇 Joined into cart lines
class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    image: Optional[str] = None

# 👇 Catalog listing and detail responses
class ProductOut(ProductSummary):
    description: str
    category: str
    sizes: List[str] = []
    created_at: Optional[datetime] = None
