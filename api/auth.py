"""
Bearer-token check shared by all API routers.

A single shared secret (AUTH_SECRET_KEY); real identity management is
out of scope for this service.
"""
import secrets
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import settings

_bearer = HTTPBearer(auto_error=False)


def require_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> str:
    """
    FastAPI dependency validating the Authorization header.

    Raises:
        HTTPException 401: Header missing or not a bearer token
        HTTPException 403: Token does not match the configured secret
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authorization token is missing or malformed")

    expected = settings.auth_secret_key
    if not expected or not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(status_code=403, detail="Invalid authorization token")

    return credentials.credentials
