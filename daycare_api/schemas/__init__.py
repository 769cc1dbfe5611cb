from daycare_api.schemas.message import (
    SendMessageRequest, SendMessageResponse,
    InboxItemDto, SentItemDto, ReplyDto, ThreadDto,
    RecipientDto, RecipientDirectoryDto,
)

__all__ = [
    "SendMessageRequest", "SendMessageResponse",
    "InboxItemDto", "SentItemDto", "ReplyDto", "ThreadDto",
    "RecipientDto", "RecipientDirectoryDto",
]
