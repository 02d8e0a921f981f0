import asyncio
import os

from sqlalchemy import select, func

from app.core.db import AsyncSessionLocal
from app.core.security import hash_password
from app.models.enums.user_role import UserRole
from app.models.users.user_models import User


async def create_admin():
    email = os.getenv("ADMIN_EMAIL", "admin@example.com").lower()
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        raise SystemExit("ADMIN_PASSWORD must be set")

    async with AsyncSessionLocal() as session:
        existing = await session.scalar(
            select(User).where(func.lower(User.email) == email)
        )
        if existing:
            existing.role = UserRole.ADMIN
            existing.password_hash = hash_password(password)
            existing.is_active = True
            existing.token_version += 1
        else:
            session.add(
                User(
                    email=email,
                    name="Administrator",
                    password_hash=hash_password(password),
                    role=UserRole.ADMIN,
                    is_active=True,
                )
            )
        await session.commit()
        print(f"Admin user ready: {email}")


if __name__ == "__main__":
    asyncio.run(create_admin())
