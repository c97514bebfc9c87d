import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUTH_JWKS_URL"] = ""
os.environ["AUTH_AUDIENCE"] = ""
os.environ["AUTH_ISSUER"] = ""

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_tracker.api.deps import get_ai_client
from expense_tracker.core.auth import create_access_token
from expense_tracker.core.database import Base, build_engine, get_async_session
from expense_tracker.main import app
from expense_tracker.schemas.user import UserCreate
from expense_tracker.services.ingestion import AIClient
from expense_tracker.services.user_household import UserHouseholdTransactionCoordinator, default_household_name


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def register(db) -> Callable:
    """Create a user with its default household; returns (user_id, household_id)."""

    async def _register(name: str, email: Optional[str] = None):
        user, household = await UserHouseholdTransactionCoordinator(db).create_user_with_household(
            UserCreate(
                email=email or f"{name.lower()}@example.com",
                name=name,
                auth_provider_id=f"auth|{name.lower()}",
            ),
            default_household_name(name),
        )
        return user.id, household.id

    return _register


class FakeAI:
    """Records requests to the AI API and answers from a queue of handlers."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []

    def queue_json(self, payload: Dict[str, Any], status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=payload))

    def queue_tool_call(self, arguments: str) -> None:
        self.queue_json({
            "choices": [{
                "message": {
                    "role": "assistant",
                    "tool_calls": [{
                        "id": "call_1",
                        "type": "function",
                        "function": {"name": "log_expense", "arguments": arguments},
                    }],
                },
            }],
        })

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"error": "no response queued"})
        return self.responses.pop(0)

    def client(self) -> AIClient:
        return AIClient(
            api_key="test-ai-key",
            base_url="http://ai.test/v1",
            model="test-model",
            transcription_model="test-transcribe",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_ai() -> FakeAI:
    return FakeAI()


@pytest.fixture
async def client(session_factory, fake_ai):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_ai_client] = fake_ai.client
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[..., Dict[str, str]]:
    def _headers(subject: str, household_id: Optional[str] = None) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {create_access_token(subject)}"}
        if household_id:
            headers["X-Household-Id"] = str(household_id)
        return headers

    return _headers
