from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, update, or_, and_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload
from sqlalchemy.sql.elements import ColumnElement

from daycare_api.models.message import Message, RecipientType


def inbox_predicate(viewer_id: UUID) -> ColumnElement[bool]:
    """Root messages addressed to the viewer, plus every broadcast."""
    return and_(
        Message.parent_message_id.is_(None),
        or_(
            Message.recipient_id == viewer_id,
            Message.recipient_type == RecipientType.ALL,
        ),
    )


def sent_predicate(viewer_id: UUID) -> ColumnElement[bool]:
    return and_(
        Message.parent_message_id.is_(None),
        Message.sender_id == viewer_id,
    )


class MessageStore:
    """Message table access. One instance per request session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, message: Message) -> int:
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message.id

    async def get(self, message_id: int) -> Optional[Message]:
        stmt = (
            select(Message)
            .options(selectinload(Message.sender), selectinload(Message.recipient))
            .execution_options(populate_existing=True)
            .where(Message.id == message_id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_roots(self, predicate: ColumnElement[bool]) -> List[Tuple[Message, int]]:
        """Root messages matching ``predicate`` with their reply counts, newest first."""
        reply = aliased(Message)
        reply_count = (
            select(func.count(reply.id))
            .where(reply.parent_message_id == Message.id)
            .correlate(Message)
            .scalar_subquery()
        )
        stmt = (
            select(Message, reply_count)
            .options(selectinload(Message.sender), selectinload(Message.recipient))
            .execution_options(populate_existing=True)
            .where(predicate)
            .order_by(Message.sent_at.desc(), Message.id.desc())
        )
        result = await self.db.execute(stmt)
        return [(msg, count) for msg, count in result.all()]

    async def list_replies(self, root_id: int) -> List[Message]:
        """Replies to ``root_id``, oldest first."""
        stmt = (
            select(Message)
            .options(selectinload(Message.sender))
            .execution_options(populate_existing=True)
            .where(Message.parent_message_id == root_id)
            .order_by(Message.sent_at.asc(), Message.id.asc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def mark_read_if_recipient(self, message_id: int, viewer_id: UUID) -> bool:
        """Flip ``is_read`` for the individual recipient in one conditional update.

        Returns True only for the call that performed the transition; racing
        callers match no row and get False.
        """
        stmt = (
            update(Message)
            .where(
                Message.id == message_id,
                Message.recipient_id == viewer_id,
                Message.recipient_type == RecipientType.INDIVIDUAL,
                Message.is_read == False,  # noqa: E712
            )
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return result.rowcount == 1
