import pyotp
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.bcrypt_password_hasher import BcryptPasswordHasher
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_password_hasher, get_unit_of_work

PASSWORD = "SecurePass123!"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    from config import ApplicationConfig
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    fast_hasher = BcryptPasswordHasher(rounds=4)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_password_hasher] = lambda: fast_hasher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def signed_up(client):
    """Client holding the cookies of a freshly signed-up user"""
    response = await client.post(
        "/auth/signup", json={"email": "player@example.com", "password": PASSWORD}
    )
    assert response.status_code == 201
    return client


@pytest_asyncio.fixture
async def completed(signed_up):
    """Signed-up user whose profile is complete"""
    response = await signed_up.patch("/users/me/profile", json={"username": "player_1"})
    assert response.status_code == 200
    return signed_up


@pytest_asyncio.fixture
async def two_factor_secret(completed):
    """Completed user with 2FA enabled; returns the TOTP secret"""
    generated = await completed.get("/auth/2fa/generate")
    assert generated.status_code == 200
    secret = generated.json()["secret"]

    enabled = await completed.post(
        "/auth/2fa/enable", json={"code": pyotp.TOTP(secret).now()}
    )
    assert enabled.status_code == 200
    return secret
