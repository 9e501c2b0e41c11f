"""
Pytest configuration and fixtures for testing
"""
import os

# Must be set before the application modules are imported
WEBHOOK_SECRET = "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"
os.environ["WEBHOOK_SECRET"] = WEBHOOK_SECRET
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from svix.webhooks import Webhook

from database import get_db, Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_TOKEN = "admin-session"
USER_TOKEN = "user-session"
OTHER_USER_TOKEN = "other-user-session"


class FakeIdentityProvider:
    """
    Stands in for Clerk. Sessions and roles are looked up in dicts; webhook
    signatures are checked for real with the test secret.
    """

    def __init__(self, sessions=None, roles=None, secret=WEBHOOK_SECRET):
        self.sessions = sessions if sessions is not None else {
            ADMIN_TOKEN: {"sub": "user_admin", "metadata": {"role": "admin"}},
            USER_TOKEN: {"sub": "user_alice", "metadata": {}},
            OTHER_USER_TOKEN: {"sub": "user_bob"},
        }
        self.roles = roles if roles is not None else {"user_admin": "admin"}
        self._webhook = Webhook(secret)
        self.role_lookups = 0

    async def verify_session(self, token):
        return self.sessions.get(token)

    async def get_role(self, user_id):
        self.role_lookups += 1
        return self.roles.get(user_id)

    def verify_webhook_signature(self, body, headers):
        self._webhook.verify(body, headers)


class InMemoryStore:
    """Store implementation over plain lists, counting calls for spying."""

    def __init__(self):
        self.users = {}
        self.todos = {}
        self.calls = []

    def add_user(self, user_id, email, is_subscribed=False):
        user = SimpleNamespace(
            id=user_id,
            email=email,
            is_subscribed=is_subscribed,
            subscription_ends=None,
            created_at=datetime.now(timezone.utc),
        )
        self.users[user_id] = user
        return user

    def add_todo(self, user_id, title="todo", created_at=None, todo_id=None, completed=False):
        now = created_at or datetime.now(timezone.utc)
        todo = SimpleNamespace(
            id=todo_id or uuid4().hex,
            user_id=user_id,
            title=title,
            completed=completed,
            created_at=now,
            updated_at=now,
        )
        self.todos[todo.id] = todo
        return todo

    async def find_user(self, email):
        self.calls.append("find_user")
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_user(self, user_id):
        self.calls.append("get_user")
        return self.users.get(user_id)

    async def list_todos(self, user_id, limit, offset):
        self.calls.append("list_todos")
        owned = [t for t in self.todos.values() if t.user_id == user_id]
        owned.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return owned[offset:offset + limit]

    async def count_todos(self, user_id):
        self.calls.append("count_todos")
        return sum(1 for t in self.todos.values() if t.user_id == user_id)

    async def get_todo(self, todo_id):
        self.calls.append("get_todo")
        return self.todos.get(todo_id)

    async def create_todo(self, user_id, title):
        self.calls.append("create_todo")
        return self.add_todo(user_id, title)

    async def update_todo(self, todo_id, completed):
        self.calls.append("update_todo")
        todo = self.todos.get(todo_id)
        if todo is not None:
            todo.completed = completed
        return todo

    async def update_user(self, email, is_subscribed, subscription_ends):
        self.calls.append("update_user")
        user = next((u for u in self.users.values() if u.email == email), None)
        if user is not None:
            user.is_subscribed = is_subscribed
            user.subscription_ends = subscription_ends
        return user

    async def create_user(self, user_id, email):
        self.calls.append("create_user")
        for user in self.users.values():
            if user.id == user_id or user.email == email:
                return user
        return self.add_user(user_id, email)

    async def delete_todo(self, todo_id):
        self.calls.append("delete_todo")
        return self.todos.pop(todo_id, None) is not None


def sign_webhook(body: str, msg_id: str = "msg_test", secret: str = WEBHOOK_SECRET) -> dict:
    """Svix headers for `body`, signed with the test secret."""
    now = datetime.now(timezone.utc)
    signature = Webhook(secret).sign(msg_id, now, body)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(now.timestamp())),
        "svix-signature": signature,
    }


@pytest.fixture
async def session_factory():
    """
    Isolated in-memory SQLite database per test. StaticPool keeps a single
    connection so every session sees the same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Import models to ensure they're registered with Base
    import database_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
async def client(session_factory, identity_provider):
    """
    Async HTTP client against the app with the test database and the fake
    identity provider installed.
    """
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.state.identity_provider = identity_provider
    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()
    del app.state.identity_provider


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
