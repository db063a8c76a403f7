"""Authentication dependencies: bearer JWT to resolved Principal."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from workhub.domain.exceptions import AuthenticationException
from workhub.domain.value_objects import Principal
from workhub.infrastructure.persistence.database import get_db
from workhub.infrastructure.persistence.repositories import SqlPrincipalDirectory
from workhub.infrastructure.security.jwt import verify_token

_http_bearer = HTTPBearer(auto_error=False)


def get_principal_directory(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SqlPrincipalDirectory:
    return SqlPrincipalDirectory(db)


async def resolve_principal(token: str, directory: SqlPrincipalDirectory) -> Principal:
    """Verify token and load its subject. Raises AuthenticationException."""
    try:
        payload = verify_token(token)
    except ValueError as e:
        raise AuthenticationException("Invalid or expired token") from e
    principal = await directory.get_principal(payload["sub"])
    if principal is None:
        raise AuthenticationException("User not found or inactive")
    return principal


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    directory: Annotated[SqlPrincipalDirectory, Depends(get_principal_directory)],
) -> Principal:
    """Return the authenticated principal; 401 if the bearer token is missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    return await resolve_principal(credentials.credentials, directory)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
