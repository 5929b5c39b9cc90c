from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from realtime_chat.api.deps import (
    ConnectionsDep,
    CurrentPrincipal,
    PresenceDep,
    UoWDep,
    UploaderDep,
)
from realtime_chat.api.v1.schemas.message import (
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
)
from realtime_chat.api.v1.schemas.user import ContactResponse
from realtime_chat.application.dto.message import SendMessageDTO
from realtime_chat.services import message_service

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/users", response_model=list[ContactResponse])
async def list_contacts(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ContactResponse]:
    users = await message_service.list_contacts(principal, uow)
    return [ContactResponse.model_validate(u) for u in users]


@router.get("/unread-counts", response_model=dict[str, int])
async def unread_counts(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> dict[str, int]:
    counts = await message_service.unread_counts(principal, uow)
    return {str(sender_id): count for sender_id, count in counts.items()}


@router.post("/read/{user_id}", response_model=MarkReadResponse)
async def mark_read(
    user_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    updated = await message_service.mark_read(principal, user_id, uow)
    return MarkReadResponse(updated=updated)


@router.post("/send/{user_id}", response_model=MessageResponse, status_code=201)
async def send_message(
    user_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
    presence: PresenceDep,
    connections: ConnectionsDep,
    uploader: UploaderDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        principal,
        user_id,
        SendMessageDTO(text=body.text, image=body.image, video=body.video),
        uow,
        presence,
        connections,
        uploader,
    )
    return MessageResponse.model_validate(msg)


@router.get("/{user_id}", response_model=list[MessageResponse])
async def list_messages(
    user_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.list_messages(principal, user_id, uow)
    return [MessageResponse.model_validate(m) for m in messages]
