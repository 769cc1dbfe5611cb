"""Internal mail between parents, teachers and administrators.

Every operation takes an explicit ``Caller`` and works against one request
session. Listings are pure reads; opening a thread is the only read that
writes, and it does so through a single conditional update.
"""
import logging
from typing import Awaitable, Callable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from daycare_api.config import get_settings
from daycare_api.errors import BadRequest, Forbidden, MissingRecipient, NoAdminAvailable, NotFound
from daycare_api.events import MessageSent
from daycare_api.models.message import Message, RecipientType, SUBJECT_MAX_LENGTH
from daycare_api.models.user import User
from daycare_api.schemas.message import (
    SendMessageRequest,
    InboxItemDto,
    SentItemDto,
    ReplyDto,
    ThreadDto,
    RecipientDto,
    RecipientDirectoryDto,
)
from daycare_api.services.identity import Caller, IdentityDirectory
from daycare_api.services.message_store import MessageStore, inbox_predicate, sent_predicate
from daycare_api.services.routing import Accepted, RejectReason, resolve_recipient

logger = logging.getLogger(__name__)
settings = get_settings()

Notifier = Callable[[MessageSent], Awaitable[None]]

_REJECTIONS = {
    RejectReason.FORBIDDEN: Forbidden,
    RejectReason.NO_ADMIN_AVAILABLE: NoAdminAvailable,
    RejectReason.MISSING_RECIPIENT: MissingRecipient,
}


def _recipient_name(msg: Message) -> str:
    if msg.recipient is None:
        return settings.broadcast_label
    return msg.recipient.display_name


def _parse_recipient_type(value: Optional[str]) -> Optional[RecipientType]:
    try:
        return RecipientType(value)
    except ValueError:
        return None


def _parse_user_id(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise BadRequest("RecipientId is not a valid user id")


class MessagingService:
    def __init__(self, db: AsyncSession, notifier: Optional[Notifier] = None):
        self.store = MessageStore(db)
        self.identity = IdentityDirectory(db)
        self.notifier = notifier

    async def send(self, caller: Caller, body: SendMessageRequest) -> int:
        if not body.subject or not body.content:
            raise BadRequest()
        if len(body.subject) > SUBJECT_MAX_LENGTH:
            raise BadRequest("Subject is too long")

        requested_type = _parse_recipient_type(body.recipient_type)
        if requested_type is None:
            if not caller.is_admin:
                raise Forbidden()
            raise BadRequest(f"Unknown recipient type: {body.recipient_type}")

        # Only non-admins are redirected, so only they need the admin list
        admin_ids: List[UUID] = [] if caller.is_admin else await self.identity.admin_ids()
        requested_id = _parse_user_id(body.recipient_id) if caller.is_admin else None

        decision = resolve_recipient(caller.is_admin, requested_type, requested_id, admin_ids)
        if not isinstance(decision, Accepted):
            logger.warning(f"Send by {caller.id} rejected: {decision.reason.value}")
            raise _REJECTIONS[decision.reason]()

        if decision.redirected:
            logger.info(f"Non-admin {caller.id} message routed to admin {decision.recipient_id}")
        elif decision.recipient_id is not None:
            if await self.identity.get_user(decision.recipient_id) is None:
                raise BadRequest("Recipient not found")

        parent_id = await self._resolve_parent(body.parent_message_id, decision)

        msg = Message(
            sender_id=caller.id,
            recipient_id=decision.recipient_id,
            recipient_type=decision.recipient_type,
            subject=body.subject,
            content=body.content,
            parent_message_id=parent_id,
            is_read=False,
        )
        message_id = await self.store.insert(msg)
        logger.info(f"Message {message_id} sent by {caller.id} ({decision.recipient_type.value})")

        if self.notifier is not None:
            await self.notifier(
                MessageSent(
                    id=message_id,
                    sender_id=caller.id,
                    recipient_id=decision.recipient_id,
                    subject=msg.subject,
                )
            )
        return message_id

    async def _resolve_parent(self, parent_message_id: Optional[int], decision: Accepted) -> Optional[int]:
        """Anchor a reply on its thread root so threads stay one level deep."""
        if parent_message_id is None:
            return None
        if decision.recipient_type == RecipientType.ALL:
            raise BadRequest("Replies must be addressed to an individual")
        parent = await self.store.get(parent_message_id)
        if parent is None:
            raise NotFound("Parent message not found")
        return parent.parent_message_id or parent.id

    async def get_inbox(self, caller: Caller) -> List[InboxItemDto]:
        rows = await self.store.list_roots(inbox_predicate(caller.id))
        return [
            InboxItemDto(
                id=msg.id,
                sender_id=msg.sender_id,
                sender_name=msg.sender.display_name,
                subject=msg.subject,
                content=msg.content,
                sent_at=msg.sent_at,
                is_read=msg.is_read,
                recipient_type=msg.recipient_type,
                reply_count=reply_count,
            )
            for msg, reply_count in rows
        ]

    async def get_sent(self, caller: Caller) -> List[SentItemDto]:
        rows = await self.store.list_roots(sent_predicate(caller.id))
        return [
            SentItemDto(
                id=msg.id,
                recipient_id=msg.recipient_id,
                recipient_name=_recipient_name(msg),
                subject=msg.subject,
                content=msg.content,
                sent_at=msg.sent_at,
                recipient_type=msg.recipient_type,
                reply_count=reply_count,
            )
            for msg, reply_count in rows
        ]

    async def get_thread(self, message_id: int, caller: Caller) -> ThreadDto:
        """Root message plus its replies, oldest reply first.

        Opening a thread marks the root read when the caller is its
        individual recipient. Participation is not checked here.
        """
        # The update runs first so the load below sees the committed flag,
        # whichever concurrent view won the transition
        await self.store.mark_read_if_recipient(message_id, caller.id)
        root = await self.store.get(message_id)
        if root is None:
            raise NotFound()

        replies = await self.store.list_replies(root.id)

        return ThreadDto(
            id=root.id,
            sender_id=root.sender_id,
            sender_name=root.sender.display_name,
            recipient_id=root.recipient_id,
            recipient_name=_recipient_name(root),
            subject=root.subject,
            content=root.content,
            sent_at=root.sent_at,
            is_read=root.is_read,
            recipient_type=root.recipient_type,
            replies=[
                ReplyDto(
                    id=r.id,
                    sender_id=r.sender_id,
                    sender_name=r.sender.display_name,
                    content=r.content,
                    sent_at=r.sent_at,
                )
                for r in replies
            ],
        )

    async def list_recipients(self, caller: Caller) -> RecipientDirectoryDto:
        if not caller.is_admin:
            raise Forbidden()

        parents = await self.identity.users_in_role(settings.parent_role)
        teachers = await self.identity.users_in_role(settings.teacher_role)
        return RecipientDirectoryDto(
            parents=_directory_entries(parents),
            teachers=_directory_entries(teachers),
        )


def _directory_entries(users: List[User]) -> List[RecipientDto]:
    entries = [RecipientDto(id=u.id, name=u.display_name, email=u.email) for u in users]
    return sorted(entries, key=lambda e: e.name.lower())
