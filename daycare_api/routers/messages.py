from fastapi import APIRouter, Depends, HTTPException
from typing import List

from daycare_api.dependencies import get_current_caller, get_messaging_service
from daycare_api.errors import MessagingError
from daycare_api.schemas.message import (
    SendMessageRequest,
    SendMessageResponse,
    InboxItemDto,
    SentItemDto,
    ThreadDto,
    RecipientDirectoryDto,
)
from daycare_api.services.identity import Caller
from daycare_api.services.messaging import MessagingService

router = APIRouter()


def _http_error(e: MessagingError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/inbox", response_model=List[InboxItemDto])
async def get_inbox(
    caller: Caller = Depends(get_current_caller),
    service: MessagingService = Depends(get_messaging_service),
):
    """Root messages addressed to the caller or broadcast to everyone, newest first."""
    return await service.get_inbox(caller)


@router.get("/sent", response_model=List[SentItemDto])
async def get_sent(
    caller: Caller = Depends(get_current_caller),
    service: MessagingService = Depends(get_messaging_service),
):
    return await service.get_sent(caller)


@router.get("/recipients", response_model=RecipientDirectoryDto)
async def get_recipients(
    caller: Caller = Depends(get_current_caller),
    service: MessagingService = Depends(get_messaging_service),
):
    """Parents and teachers an admin can write to."""
    try:
        return await service.list_recipients(caller)
    except MessagingError as e:
        raise _http_error(e)


@router.get("/{message_id}", response_model=ThreadDto)
async def get_message(
    message_id: int,
    caller: Caller = Depends(get_current_caller),
    service: MessagingService = Depends(get_messaging_service),
):
    """Open a thread; marks it read when the caller is its recipient."""
    try:
        return await service.get_thread(message_id, caller)
    except MessagingError as e:
        raise _http_error(e)


@router.post("", response_model=SendMessageResponse)
async def send_message(
    body: SendMessageRequest,
    caller: Caller = Depends(get_current_caller),
    service: MessagingService = Depends(get_messaging_service),
):
    try:
        message_id = await service.send(caller, body)
    except MessagingError as e:
        raise _http_error(e)
    return SendMessageResponse(message_id=message_id)
