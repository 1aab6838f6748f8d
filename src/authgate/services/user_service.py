"""User service — account lookup, creation and password resets.

Learn: Service layer separates business logic from HTTP routing.
The auth routes and the admin CLI share this class, so registration
and password resets hash credentials the same way.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.password import hash_password
from authgate.db.models import User


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email).limit(1))
        return result.scalars().first()

    async def create_user(
        self,
        email: str,
        full_name: str,
        password: str,
        role: str = "developer",
    ) -> User:
        user = User(
            email=email,
            full_name=full_name,
            password_hash=hash_password(password),
            role=role,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def reset_password(self, email: str, new_password: str) -> Optional[User]:
        """Overwrite a user's stored credential. Returns None if no such user."""
        user = await self.get_by_email(email)
        if user is None:
            return None
        user.password_hash = hash_password(new_password)
        await self.db.commit()
        return user
