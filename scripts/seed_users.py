"""Seed a local database with an admin, a teacher and a parent.

Usage:
    python -m scripts.seed_users
"""
import asyncio

from sqlalchemy import select

from daycare_api.config import get_settings
from daycare_api.database import async_session, engine, Base
from daycare_api.models import User, UserRole

settings = get_settings()

SEED_USERS = [
    ("Ada", "Admin", "admin@daycare.local", settings.admin_role),
    ("Tom", "Teacher", "teacher@daycare.local", settings.teacher_role),
    ("Pat", "Parent", "parent@daycare.local", settings.parent_role),
]


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        created = 0
        for first_name, last_name, email, role in SEED_USERS:
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                continue
            user = User(first_name=first_name, last_name=last_name, email=email)
            user.roles.append(UserRole(role=role))
            session.add(user)
            created += 1

        await session.commit()
        print(f"Done. Created: {created}, Skipped (already present): {len(SEED_USERS) - created}")


if __name__ == "__main__":
    asyncio.run(main())
