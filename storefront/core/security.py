from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from storefront.core.config import settings
from storefront.core.exceptions import AuthorizationError

# Tokens are issued by the identity provider; create_access_token mirrors its
# claims for local development and tests.
def create_access_token(user_id: int, email: str, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Return the verified claims (sub, email) or raise AuthorizationError."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthorizationError("Invalid token")

    sub = payload.get("sub")
    email = payload.get("email")
    if sub is None or not email:
        raise AuthorizationError("Invalid token")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise AuthorizationError("Invalid token")

    return {"user_id": user_id, "email": email}
