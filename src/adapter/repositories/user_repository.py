from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User, UserStatus


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        stmt = select(User).where(User.username == username)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update_status(self, user_id: UUID, status: UserStatus) -> Optional[User]:
        return await self._update(user_id, status=status)

    async def set_two_factor_secret(self, user_id: UUID, secret: str) -> Optional[User]:
        return await self._update(user_id, two_factor_secret=secret)

    async def turn_on_two_factor(self, user_id: UUID) -> Optional[User]:
        return await self._update(user_id, two_factor_enabled=True)

    async def turn_off_two_factor(self, user_id: UUID) -> Optional[User]:
        return await self._update(user_id, two_factor_enabled=False, two_factor_secret="")

    async def mark_profile_complete(
        self, user_id: UUID, username: str, avatar: Optional[str] = None
    ) -> Optional[User]:
        fields = {"username": username, "profile_complete": True}
        if avatar is not None:
            fields["avatar"] = avatar
        return await self._update(user_id, **fields)

    async def _update(self, user_id: UUID, **fields) -> Optional[User]:
        """Apply all fields in a single flushed UPDATE"""
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user
