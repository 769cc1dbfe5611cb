from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from daycare_api.models.message import RecipientType


def to_camel(string: str) -> str:
    components = string.split('_')
    return components[0] + ''.join(x.title() for x in components[1:])


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class SendMessageRequest(CamelModel):
    # Emptiness is checked by the service so it answers 400 like other policy errors
    subject: Optional[str] = None
    content: Optional[str] = None
    recipient_type: Optional[str] = RecipientType.INDIVIDUAL.value
    recipient_id: Optional[str] = None  # ignored for non-admin senders
    parent_message_id: Optional[int] = None

    @field_validator("recipient_type", mode="before")
    @classmethod
    def _recipient_type_as_text(cls, value):
        # Unknown types are a routing decision, not a validation error
        if value is None or isinstance(value, str):
            return value
        return str(value)


class SendMessageResponse(CamelModel):
    success: bool = True
    message_id: int


class InboxItemDto(CamelModel):
    id: int
    sender_id: UUID
    sender_name: str
    subject: str
    content: str
    sent_at: datetime
    is_read: bool
    recipient_type: RecipientType
    reply_count: int = 0


class SentItemDto(CamelModel):
    id: int
    recipient_id: Optional[UUID] = None
    recipient_name: str
    subject: str
    content: str
    sent_at: datetime
    recipient_type: RecipientType
    reply_count: int = 0


class ReplyDto(CamelModel):
    id: int
    sender_id: UUID
    sender_name: str
    content: str
    sent_at: datetime


class ThreadDto(CamelModel):
    id: int
    sender_id: UUID
    sender_name: str
    recipient_id: Optional[UUID] = None
    recipient_name: str
    subject: str
    content: str
    sent_at: datetime
    is_read: bool
    recipient_type: RecipientType
    replies: List[ReplyDto]


class RecipientDto(CamelModel):
    id: UUID
    name: str
    email: Optional[str] = None


class RecipientDirectoryDto(CamelModel):
    parents: List[RecipientDto]
    teachers: List[RecipientDto]
