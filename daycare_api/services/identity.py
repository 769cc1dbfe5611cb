from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare_api.config import get_settings
from daycare_api.models.user import User, UserRole

settings = get_settings()


@dataclass(frozen=True)
class Caller:
    """Verified identity of whoever invokes a messaging operation."""
    id: UUID
    roles: frozenset = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return settings.admin_role in self.roles


class IdentityDirectory:
    """Read-through to the identity provider's user and role index."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def users_in_role(self, role: str) -> List[User]:
        """Users holding ``role``, longest-registered first."""
        stmt = (
            select(User)
            .join(UserRole, UserRole.user_id == User.id)
            .where(UserRole.role == role)
            .order_by(User.created_at, User.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().unique().all())

    async def admin_ids(self) -> List[UUID]:
        return [u.id for u in await self.users_in_role(settings.admin_role)]
