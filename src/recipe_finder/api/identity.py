"""Caller identity for per-user endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, HTTPException, Request, status

from recipe_finder.domain.auth import Caller
from recipe_finder.services.auth import InvalidTokenError

if TYPE_CHECKING:
    from recipe_finder.containers import AppContainer

BEARER_PREFIX = "bearer "


async def require_caller(
    request: Request, authorization: str | None = Header(default=None)
) -> Caller:
    """Resolve the caller from an `Authorization: Bearer <token>` header."""
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization bearer token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    container: AppContainer = request.app.state.container
    try:
        return container.auth_service.authenticate(token)
    except InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None
