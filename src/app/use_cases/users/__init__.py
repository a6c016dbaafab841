"""
User Use Cases

Profile management for the authenticated user.
"""

from .complete_profile_use_case import CompleteProfileUseCase
from .dtos import CompleteProfileCommand, ProfileResponse

__all__ = [
    "CompleteProfileUseCase",
    "CompleteProfileCommand",
    "ProfileResponse",
]
