# ============================================================================
# FILE: songshare/api/dependencies.py
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from songshare.core.security import Principal, decode_access_token
from songshare.core.storage import BlobStore, blob_store
from typing import Optional

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/user/token", auto_error=False)

def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[Principal]:
    """
    Get the authenticated caller from the JWT
    Returns None if no token or invalid token (allows anonymous access)
    """
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except HTTPException:
        return None

    try:
        return Principal(
            id=int(payload["sub"]),
            username=payload.get("username", ""),
            role=payload.get("role", "user"),
        )
    except (KeyError, TypeError, ValueError):
        return None

def require_principal(
    principal: Optional[Principal] = Depends(get_current_principal)
) -> Principal:
    """
    Require authenticated user (raises 401 if not authenticated)
    Use this dependency for protected endpoints
    """
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal

def require_admin(
    principal: Principal = Depends(require_principal)
) -> Principal:
    """Require an administrator (403 otherwise)"""
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return principal

def get_blob_store() -> BlobStore:
    """Blob store dependency; tests override this with a temporary store"""
    return blob_store
