from pydantic import BaseModel
from typing import Optional

class CheckoutSessionOut(BaseModel):
    url: str
    session_id: str

class WebhookResult(BaseModel):
    status: str  # "processed", "duplicate", "failed" or "ignored"
    order_id: Optional[int] = None
