"""
User Use Case DTOs
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CompleteProfileCommand(BaseModel):
    """Profile fields submitted on the completion page"""

    user_id: UUID
    username: str
    avatar: Optional[str] = None


class ProfileResponse(BaseModel):
    """Public profile after an update"""

    profile: dict
