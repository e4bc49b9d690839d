from pydantic import BaseModel

class CurrentUser(BaseModel):
    """Caller identity resolved from the bearer token, passed to every cart/order operation."""
    id: int
    email: str
