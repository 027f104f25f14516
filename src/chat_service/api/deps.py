"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated, AsyncIterator, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from chat_service.application.dto.principal import Principal
from chat_service.application.ports.auth import TokenVerifier
from chat_service.application.ports.bus import RoomPublisher
from chat_service.application.repositories.relationship import RelationshipReader
from chat_service.application.uow import UnitOfWork
from chat_service.config import settings
from chat_service.infrastructure.auth.hs256_verifier import HS256Verifier
from chat_service.infrastructure.auth.jwks_verifier import JWKSVerifier
from chat_service.infrastructure.db.repositories.relationship import SqlRelationshipReader
from chat_service.infrastructure.db.session import AsyncSessionLocal
from chat_service.infrastructure.db.uow import SqlAlchemyUoW

_bearer_scheme = HTTPBearer()

UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


@asynccontextmanager
async def open_uow() -> AsyncIterator[UnitOfWork]:
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUoW(session)


def get_uow_factory() -> UoWFactory:
    """Factory for code paths that open their own units of work (WebSocket handlers)."""
    return open_uow


async def get_uow() -> AsyncIterator[UnitOfWork]:
    async with open_uow() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_relationship_reader() -> RelationshipReader:
    return SqlRelationshipReader(AsyncSessionLocal)


RelationshipReaderDep = Annotated[RelationshipReader, Depends(get_relationship_reader)]


def get_room_publisher(conn: HTTPConnection) -> RoomPublisher:
    return conn.app.state.room_publisher


RoomPublisherDep = Annotated[RoomPublisher, Depends(get_room_publisher)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
