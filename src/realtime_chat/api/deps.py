"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Annotated, AsyncIterator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from realtime_chat.application.dto.principal import Principal
from realtime_chat.application.ports.auth import TokenVerifier
from realtime_chat.application.ports.media import MediaUploader
from realtime_chat.application.uow import UnitOfWork
from realtime_chat.config import settings
from realtime_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from realtime_chat.infrastructure.db.session import open_uow
from realtime_chat.infrastructure.media.passthrough import PassthroughUploader
from realtime_chat.infrastructure.ws.manager import ConnectionManager
from realtime_chat.infrastructure.ws.presence import PresenceRegistry

_bearer_scheme = HTTPBearer(auto_error=False)

UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


def get_uow_factory() -> UoWFactory:
    """Opens one unit of work per call; used where a single request-scoped
    session would outlive its purpose (WebSocket connections)."""
    return open_uow


async def get_uow(
    factory: Annotated[UoWFactory, Depends(get_uow_factory)],
) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]
UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


def get_connections(conn: HTTPConnection) -> ConnectionManager:
    return conn.app.state.connections


def get_presence(conn: HTTPConnection) -> PresenceRegistry:
    return conn.app.state.presence


def get_uploader() -> MediaUploader:
    return PassthroughUploader()


ConnectionsDep = Annotated[ConnectionManager, Depends(get_connections)]
PresenceDep = Annotated[PresenceRegistry, Depends(get_presence)]
UploaderDep = Annotated[MediaUploader, Depends(get_uploader)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


def extract_token(
    conn: HTTPConnection,
    credentials: HTTPAuthorizationCredentials | None = None,
) -> str | None:
    """Bearer header first, then the session cookie set by the auth service."""
    if credentials is not None:
        return credentials.credentials
    return conn.cookies.get(settings.JWT_COOKIE_NAME)


async def get_current_principal(
    conn: HTTPConnection,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> Principal:
    token = extract_token(conn, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - No Token Provided",
        )
    verifier = get_verifier()
    try:
        return await verifier.verify(token)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
