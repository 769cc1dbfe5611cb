from dataclasses import dataclass
from typing import Optional
from uuid import UUID

MESSAGE_SENT = "message:sent"
MESSAGE_EVENTS_CHANNEL = "messages:events"


@dataclass(frozen=True)
class MessageSent:
    id: int
    sender_id: UUID
    recipient_id: Optional[UUID]
    subject: str

    @property
    def broadcast(self) -> bool:
        return self.recipient_id is None

    def to_payload(self) -> dict:
        return {
            "event": MESSAGE_SENT,
            "messageId": self.id,
            "senderId": str(self.sender_id),
            "recipientId": str(self.recipient_id) if self.recipient_id else None,
            "broadcast": self.broadcast,
            "subject": self.subject,
        }
