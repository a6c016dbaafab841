from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import User, UserStatus


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update_status(self, user_id: UUID, status: UserStatus) -> Optional[User]:
        """Set presence status"""
        pass

    @abstractmethod
    async def set_two_factor_secret(self, user_id: UUID, secret: str) -> Optional[User]:
        """Store a freshly generated (not yet enabled) TOTP secret"""
        pass

    @abstractmethod
    async def turn_on_two_factor(self, user_id: UUID) -> Optional[User]:
        """Enable 2FA for the stored secret"""
        pass

    @abstractmethod
    async def turn_off_two_factor(self, user_id: UUID) -> Optional[User]:
        """Disable 2FA and clear the secret in one update"""
        pass

    @abstractmethod
    async def mark_profile_complete(
        self, user_id: UUID, username: str, avatar: Optional[str] = None
    ) -> Optional[User]:
        """Set profile fields and flag the profile complete in one update"""
        pass
