from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, HttpUrl

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    CompleteProfileCommand,
    CompleteProfileUseCase,
    ProfileResponse,
)
from src.depends import get_current_claims, get_unit_of_work
from src.domain.entities import SessionClaims

router = APIRouter(prefix="/users", tags=["User"])


class CompleteProfileRequest(BaseModel):
    """Profile completion HTTP request payload"""

    username: str = Field(
        ..., min_length=3, max_length=20, pattern=r"^[a-zA-Z0-9_-]+$"
    )
    avatar: Optional[HttpUrl] = None


@router.patch("/me/profile", status_code=status.HTTP_200_OK, response_model=ProfileResponse)
async def complete_profile(
    request: CompleteProfileRequest,
    claims: SessionClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Complete Profile

    Sets username (and avatar) and marks the profile complete.

    Raises:
        - 401 Unauthorized: Invalid token, or user deleted
        - 409 Conflict: Username already taken
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = CompleteProfileCommand(
        user_id=claims.subject_id,
        username=request.username,
        avatar=str(request.avatar) if request.avatar else None,
    )

    use_case = CompleteProfileUseCase(uow)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "USERNAME_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        elif error.code == "INVALID_USERNAME":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value
