"""
project_service/auth_context.py

Authentication context primitives for FastAPI dependency injection.

Contains:
- verify_token: JWT verification against the configured signing key
- AuthContext: per-request identity (username, roles, raw access token)
- require_auth_context: FastAPI dependency for auth enforcement
- RequestIdentity: identity oracle consumed by ProjectService

Tokens are issued by the identity provider. This service only verifies them
and reads the caller's username and roles; nothing is cached between requests.
"""

from __future__ import annotations

from typing import Any, Dict, Set

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from project_service.config import ALGORITHM, AUTH_CLIENT_ID, IS_DEV, SECRET_KEY

# Security scheme for HTTPBearer
security = HTTPBearer()


# ---------------------------------------------------------
# JWT Token Verification
# ---------------------------------------------------------
def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        return jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def extract_roles(payload: Dict[str, Any]) -> Set[str]:
    """
    Collect role names from a token payload.

    Looks at, in order:
    - resource_access[AUTH_CLIENT_ID].roles (client roles)
    - realm_access.roles (realm roles)
    - roles (flat claim)
    """
    roles: Set[str] = set()

    client_access = (payload.get("resource_access") or {}).get(AUTH_CLIENT_ID) or {}
    roles.update(client_access.get("roles") or [])
    roles.update((payload.get("realm_access") or {}).get("roles") or [])
    roles.update(payload.get("roles") or [])

    return {str(role) for role in roles}


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Identity of the caller for a single request, derived from a verified token.
    This is the ONLY source of truth for the caller's username and roles.
    Never trust a username from request bodies or query params.

    Fields:
        username: preferred_username claim (falls back to sub)
        roles: Set of role names held by the caller
        access_token: Raw bearer token, forwarded to the task service
    """
    username: str
    roles: Set[str]
    access_token: str


def build_auth_context(token: str) -> AuthContext:
    """Verify a bearer token and turn its claims into an AuthContext."""
    payload = verify_token(token)
    username = payload.get("preferred_username") or payload.get("sub")

    if not username:
        print("[AUTH] Missing username in token payload")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return AuthContext(
        username=str(username),
        roles=extract_roles(payload),
        access_token=token,
    )


def require_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthContext:
    """
    Auth context dependency for FastAPI routes.

    Usage:
        @router.get("/protected")
        def protected_route(ctx: AuthContext = Depends(require_auth_context)):
            ...

    Raises:
        HTTPException(401): If token is invalid, expired, or has no username
    """
    ctx = build_auth_context(credentials.credentials)

    if IS_DEV:
        print(f"[AUTH] Authenticated: username={ctx.username}, roles={sorted(ctx.roles)}")

    return ctx


# ---------------------------------------------------------
# Identity oracle
# ---------------------------------------------------------
class RequestIdentity:
    """
    Identity oracle for ProjectService, backed by the current request's context.

    Each query reads the context directly; a new instance is built per request.
    """

    def __init__(self, ctx: AuthContext):
        self._ctx = ctx

    def current_username(self) -> str:
        return self._ctx.username

    def has_role(self, username: str, role: str) -> bool:
        # Only the caller's own roles are known to this service
        if username != self._ctx.username:
            return False
        return role in self._ctx.roles

    def current_access_token(self) -> str:
        return self._ctx.access_token
