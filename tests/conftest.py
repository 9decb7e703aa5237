"""Pytest fixtures for photochat tests.

Every test gets its own in-memory SQLite database, so no state leaks
between tests.
"""

import httpx
import pytest
import pytest_asyncio

from photochat.config import Config, DBConfig
from photochat.core.db_manager import DatabaseManager
from photochat.core.gateways import (
    CommentGateway,
    ConversationGateway,
    MembershipGateway,
    MessageGateway,
    UserGateway,
)
from photochat.main import create_app


@pytest.fixture
def config() -> Config:
    return Config(db=DBConfig(path=":memory:"))


@pytest_asyncio.fixture
async def db_manager(config):
    manager = DatabaseManager(config)
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def file_db_manager(tmp_path):
    """SQLite file database with a real connection pool, so concurrent sessions interleave."""
    manager = DatabaseManager(Config(db=DBConfig(path=str(tmp_path / "photochat.db"))))
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.dispose()


@pytest.fixture
def users(db_manager, config) -> UserGateway:
    return UserGateway(db_manager, config.app.default_photo, limits=config.limits)


@pytest.fixture
def conversations(db_manager, config) -> ConversationGateway:
    return ConversationGateway(db_manager, limits=config.limits)


@pytest.fixture
def members(db_manager, config) -> MembershipGateway:
    return MembershipGateway(db_manager, limits=config.limits)


@pytest.fixture
def messages(db_manager, config) -> MessageGateway:
    return MessageGateway(db_manager, limits=config.limits)


@pytest.fixture
def comments(db_manager, config) -> CommentGateway:
    return CommentGateway(db_manager, limits=config.limits)


@pytest_asyncio.fixture
async def alice(users):
    user, _ = await users.register_or_login("alice")
    return user


@pytest_asyncio.fixture
async def bob(users):
    user, _ = await users.register_or_login("bob")
    return user


@pytest_asyncio.fixture
async def carol(users):
    user, _ = await users.register_or_login("carol")
    return user


@pytest_asyncio.fixture
async def direct_chat(conversations, alice, bob):
    """Direct conversation between alice and bob."""
    return await conversations.start_direct(alice.id, "bob")


@pytest_asyncio.fixture
async def client(config):
    """HTTP client bound to a fully wired app (dishka container, routers, handlers)."""
    app = await create_app(config)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    await app.state.dishka_container.close()
