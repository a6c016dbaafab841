"""
Complete Profile Use Case

Sets the public profile fields a new account is missing and flags the
profile complete, which unlocks protected routes.
"""

import logging
import re

from sqlalchemy.exc import IntegrityError

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import CompleteProfileCommand, ProfileResponse

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,20}$")


class CompleteProfileUseCase:
    """
    Use case for profile completion.

    Business Rules:
    - Username is 3-20 chars of letters, digits, "_" or "-"
    - Username must not belong to another user
    - Username, avatar and the profile_complete flag are written together
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: CompleteProfileCommand) -> Result[ProfileResponse]:
        if not USERNAME_PATTERN.match(command.username):
            return Return.err(
                Error(
                    "INVALID_USERNAME",
                    "Username must be 3-20 letters, digits, _ or -",
                )
            )

        async with self.uow:
            user = await self.uow.users.get_by_id(command.user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            owner = await self.uow.users.get_by_username(command.username)
            if owner is not None and owner.id != user.id:
                return Return.err(
                    Error("USERNAME_ALREADY_EXISTS", "Username already taken")
                )

            try:
                user = await self.uow.users.mark_profile_complete(
                    user.id, command.username, command.avatar
                )
                await self.uow.commit()
            except IntegrityError:
                # Username claimed concurrently between the check and the update
                return Return.err(
                    Error("USERNAME_ALREADY_EXISTS", "Username already taken")
                )

            logger.info(f"Profile completed for user {user.id}")

            return Return.ok(ProfileResponse(profile=user.public_profile()))
