from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import anyio
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from realtime_chat.api.deps import (
    ConnectionsDep,
    PresenceDep,
    UoWFactory,
    UoWFactoryDep,
    extract_token,
    get_verifier,
)
from realtime_chat.application.dto.events import SenderProfile
from realtime_chat.application.dto.principal import Principal
from realtime_chat.config import settings
from realtime_chat.domain.entities.presence import PresenceLease
from realtime_chat.domain.value_objects.enums import EventType
from realtime_chat.infrastructure.ws.manager import ConnectionManager
from realtime_chat.infrastructure.ws.presence import PresenceRegistry
from realtime_chat.infrastructure.ws.protocol import (
    DeliveredIn,
    SeenIn,
    TypingIn,
    WsInbound,
    WsOutbound,
)
from realtime_chat.services import events, presence_service, receipt_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

CLOSE_UNAUTHENTICATED = 4001
CLOSE_IDENTITY_MISMATCH = 4003


@dataclass(slots=True)
class _Session:
    """Everything the read loop needs about one live connection."""

    principal: Principal
    connection_id: str
    profile: SenderProfile
    connections: ConnectionManager
    presence: PresenceRegistry
    uow_factory: UoWFactory


async def _authenticate(token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws")
async def ws_chat(
    websocket: WebSocket,
    connections: ConnectionsDep,
    presence: PresenceDep,
    uow_factory: UoWFactoryDep,
    token: str | None = Query(None),
    claimed_user_id: str | None = Query(None, alias="userId"),
) -> None:
    principal = await _authenticate(token or extract_token(websocket))
    if principal is None:
        await websocket.close(code=CLOSE_UNAUTHENTICATED, reason="Authentication failed")
        return
    if claimed_user_id is not None and claimed_user_id != str(principal.user_id):
        logger.warning("WS userId %s does not match token subject %s", claimed_user_id, principal.user_id)
        await websocket.close(code=CLOSE_IDENTITY_MISMATCH, reason="Identity mismatch")
        return

    connection_id = await connections.connect(websocket)
    # Nothing awaits between accept and register; the finally block undoes both.
    lease = presence.register(principal.user_id, connection_id)
    heartbeat_task: asyncio.Task[None] | None = None
    try:
        async with uow_factory() as uow:
            profile = await presence_service.user_connected(lease, presence, connections, uow)
        session = _Session(principal, connection_id, profile, connections, presence, uow_factory)

        heartbeat_task = asyncio.create_task(
            _heartbeat(connections, connection_id), name=f"ws-heartbeat-{connection_id}",
        )
        await _read_loop(websocket, session)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", principal.principal_key)
    finally:
        if heartbeat_task is not None:
            heartbeat_task.cancel()
        connections.disconnect(connection_id)
        with anyio.CancelScope(shield=True):
            await _release_presence(lease, presence, connections, uow_factory)


async def _release_presence(
    lease: PresenceLease,
    presence: PresenceRegistry,
    connections: ConnectionManager,
    uow_factory: UoWFactory,
) -> None:
    try:
        async with uow_factory() as uow:
            await presence_service.user_disconnected(lease, presence, connections, uow)
    except Exception:
        logger.exception("Disconnect handling failed for %s", lease.user_id)
        if presence.unregister(lease):
            await connections.broadcast(EventType.ONLINE_USERS, events.online_users_data(presence))


async def _heartbeat(connections: ConnectionManager, connection_id: str) -> None:
    """Periodic write so a dead peer is evicted even while it sends nothing."""
    interval = settings.WS_HEARTBEAT_SECONDS
    while True:
        await asyncio.sleep(interval)
        if not await connections.send(connection_id, EventType.PONG, {}):
            return


async def _send_error(ws: WebSocket, code: str, **extra: str) -> None:
    await ws.send_text(
        WsOutbound(type=EventType.ERROR, data={"code": code, **extra}).model_dump_json()
    )


async def _read_loop(ws: WebSocket, session: _Session) -> None:
    while True:
        frame = await ws.receive()
        if frame["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))
        # Text and binary frames carry the same JSON envelope.
        raw = frame.get("text")
        if raw is None:
            raw = frame.get("bytes")
        if raw is None:
            await _send_error(ws, "invalid_payload")
            continue
        try:
            msg = WsInbound.model_validate_json(raw)
        except PydanticValidationError:
            await _send_error(ws, "invalid_payload")
            continue

        try:
            if msg.type == EventType.PING:
                await ws.send_text(WsOutbound(type=EventType.PONG, data={}).model_dump_json())

            elif msg.type == EventType.TYPING:
                await _handle_typing(session, TypingIn.model_validate(msg.data))

            elif msg.type == EventType.DELIVERED:
                await _handle_delivered(session, DeliveredIn.model_validate(msg.data))

            elif msg.type == EventType.SEEN:
                await _handle_seen(session, SeenIn.model_validate(msg.data))

            else:
                await _send_error(ws, "unknown_type", type=msg.type)
        except PydanticValidationError as exc:
            await _send_error(ws, "invalid_data", detail=str(exc))


async def _handle_typing(session: _Session, event: TypingIn) -> None:
    await receipt_service.relay_typing(
        session.profile, event.to, event.is_typing, session.presence, session.connections,
    )


async def _handle_delivered(session: _Session, event: DeliveredIn) -> None:
    await receipt_service.relay_delivered(
        session.principal.user_id, event.to, event.message_id,
        session.presence, session.connections,
    )


async def _handle_seen(session: _Session, event: SeenIn) -> None:
    async with session.uow_factory() as uow:
        await receipt_service.relay_seen(
            session.principal.user_id, event.to, event.message_ids,
            uow, session.presence, session.connections,
        )
