from __future__ import annotations

"""API-key authentication and caller identity helpers."""

from dataclasses import dataclass

from fastapi import HTTPException, Request, status

from src.app.settings import settings

ANONYMOUS_CANDIDATE_HEADER = "x-candidate-id"


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity of the current caller."""
    api_key: str | None
    role: str
    candidate_id: str | None


async def resolve_caller(request: Request) -> AuthContext | None:
    """Resolve the caller from its API key.

    Returns None when no credentials were sent, so each route can decide how
    to report a missing identity. A key that is sent but unknown is always
    rejected with 401.
    """
    api_key = _extract_api_key(request)
    if api_key is None:
        if not settings.allow_anonymous:
            return None
        candidate_id = request.headers.get(ANONYMOUS_CANDIDATE_HEADER, "").strip() or None
        return AuthContext(api_key=None, role="admin", candidate_id=candidate_id)
    entry = settings.api_key_map.get(api_key)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthContext(
        api_key=api_key,
        role=entry.get("role", "candidate"),
        candidate_id=entry.get("candidate_id"),
    )


def require_authenticated(auth: AuthContext | None) -> AuthContext:
    """Reject requests that carried no credentials."""
    if auth is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth


def require_roles(auth: AuthContext, allowed: set[str]) -> None:
    """Enforce role-based access control."""
    if auth.role not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )


def _extract_api_key(request: Request) -> str | None:
    """Extract API key from headers."""
    header_key = request.headers.get("x-api-key")
    if header_key:
        return header_key.strip()
    auth = request.headers.get("authorization")
    if not auth:
        return None
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None
