"""Recipient routing for outgoing messages.

``resolve_recipient`` is a pure decision function: it never touches the
store, the admin ids it needs are looked up by the caller beforehand.
Non-admin senders can only write to support, so whatever recipient they
name is replaced by the first available admin.
"""
import enum
from dataclasses import dataclass
from typing import Optional, Sequence, Union
from uuid import UUID

from daycare_api.models.message import RecipientType


class RejectReason(str, enum.Enum):
    FORBIDDEN = "forbidden"
    NO_ADMIN_AVAILABLE = "no_admin_available"
    MISSING_RECIPIENT = "missing_recipient"


@dataclass(frozen=True)
class Accepted:
    recipient_type: RecipientType
    recipient_id: Optional[UUID]
    redirected: bool = False


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason


RecipientDecision = Union[Accepted, Rejected]


def resolve_recipient(
    sender_is_admin: bool,
    requested_type: RecipientType,
    requested_recipient_id: Optional[UUID],
    admin_ids: Sequence[UUID],
) -> RecipientDecision:
    if not sender_is_admin:
        if requested_type != RecipientType.INDIVIDUAL:
            return Rejected(RejectReason.FORBIDDEN)
        if not admin_ids:
            return Rejected(RejectReason.NO_ADMIN_AVAILABLE)
        return Accepted(RecipientType.INDIVIDUAL, admin_ids[0], redirected=True)

    if requested_type == RecipientType.ALL:
        return Accepted(RecipientType.ALL, None)

    if requested_recipient_id is None:
        return Rejected(RejectReason.MISSING_RECIPIENT)

    return Accepted(requested_type, requested_recipient_id)
