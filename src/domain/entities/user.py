"""
User Entity

Persisted account record. Session flags such as "2FA verified" never live
here; they belong to SessionClaims.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import UserStatus

DEFAULT_BANNER = "/img/baner.webp"


class User(SQLModel, table=True):
    """
    User entity - an account that can hold a session.

    Business Rules:
    - Email must be unique across all users
    - Username is optional until the profile is completed, then unique
    - Password stored as bcrypt hash
    - two_factor_secret is "" when no enrollment exists
    - two_factor_enabled and two_factor_secret are always written together
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Profile
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=20)
    avatar: Optional[str] = Field(default=None, max_length=2048)
    banner: Optional[str] = Field(default=DEFAULT_BANNER, max_length=2048)
    profile_complete: bool = Field(default=False)

    status: UserStatus = Field(default=UserStatus.offline)

    # Game stats
    level: int = Field(default=0)
    xp: int = Field(default=0)
    wins: int = Field(default=0)
    losses: int = Field(default=0)

    # Two-factor authentication
    two_factor_enabled: bool = Field(default=False)
    two_factor_secret: str = Field(default="", max_length=64)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (Index("idx_user_status", "status"),)

    @property
    def has_two_factor_secret(self) -> bool:
        return bool(self.two_factor_secret)

    def public_profile(self) -> dict:
        """Projection safe to return to clients (no email, hash or secret)"""
        return {
            "id": str(self.id),
            "username": self.username,
            "avatar": self.avatar,
            "banner": self.banner,
            "status": UserStatus(self.status).value,
            "level": self.level,
            "xp": self.xp,
            "wins": self.wins,
            "losses": self.losses,
            "two_factor_enabled": self.two_factor_enabled,
            "profile_complete": self.profile_complete,
        }
