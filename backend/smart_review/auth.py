# smart_review/auth.py
import hashlib
import logging
from typing import Optional

from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from smart_review import db

logger = logging.getLogger("auth")

bearer = HTTPBearer(auto_error=False)


def optional_bearer(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[str]:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


def has_bearer(authorization: Optional[str]) -> bool:
    """Same acceptance rule as HTTPBearer, for code running before dependencies."""
    scheme, _, token = (authorization or "").partition(" ")
    return scheme.lower() == "bearer" and bool(token.strip())


def require_bearer(token: Optional[str] = Depends(optional_bearer)) -> str:
    if token is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return token


def resolve_user_id(token: str) -> str:
    """
    Map a bearer token to the user id history rows are stored under.
    With Supabase configured the token is a Supabase session JWT; locally the
    id is derived from the token so the same token always sees the same rows.
    """
    if db.supabase is None:
        return "local-" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
    try:
        res = db.supabase.auth.get_user(token)
    except Exception as e:
        logger.info("Supabase rejected bearer token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    user = getattr(res, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    return str(user.id)


def require_user(token: str = Depends(require_bearer)) -> str:
    return resolve_user_id(token)
