from sqlalchemy import Column, DateTime, ForeignKey, Text, String, Uuid, Boolean, Integer, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from daycare_api.database import Base

SUBJECT_MAX_LENGTH = 255


class RecipientType(str, enum.Enum):
    INDIVIDUAL = "individual"
    ALL = "all"


class Message(Base):
    """Internal mail message. Broadcasts are a single row with no recipient."""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject = Column(String(SUBJECT_MAX_LENGTH), nullable=False)
    content = Column(Text, nullable=False)
    recipient_type = Column(
        Enum(RecipientType, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=RecipientType.INDIVIDUAL,
    )
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    is_read = Column(Boolean, default=False, nullable=False)

    # Foreign keys
    sender_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = Column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    parent_message_id = Column(Integer, ForeignKey("messages.id"), nullable=True, index=True)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], back_populates="messages_sent")
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="messages_received")
