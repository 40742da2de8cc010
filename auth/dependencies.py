"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Tokens arrive as an Authorization: Bearer <token> header. Verification goes
through auth.tokens.decode_access_token() only -- the decoded Claims are
trusted as-is and are not re-checked against the user store.

try_get_current_claims() is the soft variant (returns None on any failure).
get_current_claims() is the hard variant:
    no token             -> 401
    invalid/expired token -> 403
require_admin() wraps get_current_claims() and raises 403 if not admin.
ensure_owner_or_admin() is the per-resource ownership check.

Handlers receive the resolved Claims as an explicit parameter. Nothing is
stashed on the request object.

Layer rule: no imports from api/ or shipments/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import ROLE_ADMIN, Claims
from auth.tokens import decode_access_token
from core.errors import AuthenticationError, AuthorizationError, InvalidTokenError


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None


def try_get_current_claims(request: Request) -> Claims | None:
    """Return Claims for a valid bearer token, None otherwise.

    Never raises -- absent, malformed, invalid, and expired tokens all yield
    None. Public routes use this to personalize a response when a session is
    present without requiring one.
    """
    token = _bearer_token(request)
    if token is None:
        return None
    return decode_access_token(token)


def get_current_claims(request: Request) -> Claims:
    """Require a valid bearer token.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claims: Claims = Depends(get_current_claims)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError("Access token required")
    claims = decode_access_token(token)
    if claims is None:
        raise InvalidTokenError("Invalid or expired token")
    return claims


def require_admin(request: Request) -> Claims:
    """Require admin role. 401/403 for token problems, 403 if not admin."""
    claims = get_current_claims(request)
    if claims.role != ROLE_ADMIN:
        raise AuthorizationError("Admin access required")
    return claims


def ensure_owner_or_admin(claims: Claims, owner_id: int | None) -> None:
    """Raise AuthorizationError unless claims own the resource or are admin.

    Legacy records with no owner (owner_id None) are admin-only.
    """
    if claims.role == ROLE_ADMIN:
        return
    if owner_id is None or claims.id != owner_id:
        raise AuthorizationError("Access denied - you can only update your own shipments")


def is_owner(claims: Claims | None, owner_id: int | None) -> bool:
    """True when an (optional) session belongs to the resource's owner."""
    return claims is not None and owner_id is not None and claims.id == owner_id
