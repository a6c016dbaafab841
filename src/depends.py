from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.cookies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from src.app.services.password_hasher import IPasswordHasher
from src.app.services.token_service import TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import SessionCoordinator
from src.app.use_cases.two_factor import TotpEnrollment
from src.domain.entities import SessionClaims, TokenKind
from src.domain.errors import TokenError
from src.domain.route_access import RoutePolicy
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

_password_hasher = BcryptPasswordHasher()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_route_policy(request: Request) -> RoutePolicy:
    return request.app.state.route_policy


def get_password_hasher() -> IPasswordHasher:
    return _password_hasher


def get_totp_enrollment(
    request: Request, uow: UnitOfWork = Depends(get_unit_of_work)
) -> TotpEnrollment:
    config = request.app.state.config
    return TotpEnrollment(
        uow, issuer=config.TOTP_ISSUER, valid_window=config.TOTP_VALID_WINDOW
    )


def get_session_coordinator(
    uow: UnitOfWork = Depends(get_unit_of_work),
    tokens: TokenService = Depends(get_token_service),
    hasher: IPasswordHasher = Depends(get_password_hasher),
    totp: TotpEnrollment = Depends(get_totp_enrollment),
) -> SessionCoordinator:
    return SessionCoordinator(uow, tokens, hasher, totp)


def _verify(tokens: TokenService, token: Optional[str], kind: TokenKind) -> SessionClaims:
    if not token:
        raise ClientError(
            Error("MISSING_TOKEN", f"Missing {kind.value} token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    try:
        return tokens.verify(token, kind)
    except TokenError as exc:
        raise ClientError(
            Error(exc.code, str(exc)), status_code=status.HTTP_401_UNAUTHORIZED
        )


async def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> SessionClaims:
    """
    Dependency to extract and verify the access token.

    The access_token cookie is checked first, then an Authorization: Bearer
    header.

    Returns:
        Verified access-token claims

    Raises:
        ClientError: 401 if the token is missing, invalid, malformed or expired
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials
    return _verify(tokens, token, TokenKind.access)


async def get_refresh_claims(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> SessionClaims:
    """Dependency to verify the refresh_token cookie"""
    return _verify(tokens, request.cookies.get(REFRESH_TOKEN_COOKIE), TokenKind.refresh)
