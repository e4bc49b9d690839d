from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from storefront.core.exceptions import AuthorizationError
from storefront.core.security import decode_access_token
from storefront.db.session import SessionLocal
from storefront.schemas.auth import CurrentUser


# auto_error=False so a missing header goes through our 401 handler
bearer_scheme = HTTPBearer(auto_error=False)
# Dependency to get DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Dependency to get the caller from the identity provider's token
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthorizationError("Not authenticated")

    claims = decode_access_token(credentials.credentials)
    return CurrentUser(id=claims["user_id"], email=claims["email"])
