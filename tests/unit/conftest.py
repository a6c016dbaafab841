from unittest.mock import AsyncMock, MagicMock

import bcrypt
import pytest

from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.app.services.token_service import TokenService


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with the user repository"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.get_by_username = AsyncMock()
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update_status = AsyncMock()
    uow.users.set_two_factor_secret = AsyncMock()
    uow.users.turn_on_two_factor = AsyncMock()
    uow.users.turn_off_two_factor = AsyncMock()
    uow.users.mark_profile_complete = AsyncMock()

    return uow


@pytest.fixture
def token_service():
    return TokenService(
        access_secret="unit-access-secret",
        refresh_secret="unit-refresh-secret",
    )


@pytest.fixture
def hasher():
    # Low cost factor keeps unit tests fast
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def password_hash():
    return bcrypt.hashpw(b"SecurePass123!", bcrypt.gensalt(4)).decode()
