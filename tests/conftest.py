import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")

from typing import Any, Dict, List, Optional

import fakeredis.aioredis
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tripplanner.core.cache import RedisCache
from tripplanner.core.data_store import TripDataStore
from tripplanner.core.database import get_db, utcnow
from tripplanner.core.init_db import init_db
from tripplanner.core.llm_client import get_llm_gateway
from tripplanner.core.maps_client import MapsClient, get_maps_client
from tripplanner.core.redis_lifecyle import get_cache
from tripplanner.models.trips.trip_member import MemberStatus, TripMember, TripRole
from tripplanner.models.user.user import User
from tripplanner.schemas.trip.trip_schema import TripCreate
from tripplanner.services.trips.trip_service import TripService


class FakeLLM:
    """Scripted stand-in for LLMGateway; records every call."""

    def __init__(self, tool_responses: Optional[List[Dict[str, Any]]] = None, text: str = ""):
        self.tool_responses = list(tool_responses or [])
        self.text = text
        self.calls: List[Dict[str, Any]] = []

    async def complete_with_tools(self, system, messages, tools, max_tokens=None, tool_choice=None):
        self.calls.append({"system": system, "messages": messages, "tools": tools})
        if self.tool_responses:
            return self.tool_responses.pop(0)
        return {"content": [{"type": "text", "text": "Happy to help!"}], "stop_reason": "stop"}

    async def complete_text(self, system, prompt, max_tokens=None):
        self.calls.append({"system": system, "prompt": prompt})
        return self.text


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def store(session_factory):
    async with session_factory() as session:
        yield TripDataStore(session)


@pytest.fixture
async def cache():
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield RedisCache(client)
    await client.flushall()
    await client.aclose()


@pytest.fixture
def trip_service(cache):
    return TripService(cache)


@pytest.fixture
def make_user(store):
    counter = {"n": 0}

    async def _make_user(name: Optional[str] = None, email: Optional[str] = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = await store.insert(User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            hashed_password="not-a-real-hash",
        ))
        await store.commit()
        return user

    return _make_user


@pytest.fixture
def make_trip(store, trip_service):
    async def _make_trip(owner: User, name: str = "Tokyo Trip", **fields):
        data = TripCreate(name=name, start_date="2025-12-21", end_date="2026-01-06", **fields)
        return await trip_service.create_trip(store, data, owner)

    return _make_trip


@pytest.fixture
def add_member(store):
    async def _add_member(trip_id: str, user: User, role: TripRole = TripRole.EDITOR,
                          status: MemberStatus = MemberStatus.ACCEPTED) -> TripMember:
        member = await store.insert(TripMember(
            trip_id=trip_id,
            user_id=user.id,
            invited_email=user.email,
            role=role,
            status=status,
            invited_at=utcnow(),
            accepted_at=utcnow() if status == MemberStatus.ACCEPTED else None,
        ))
        await store.commit()
        return member

    return _add_member


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def maps_handler():
    """Replace ``maps_handler.respond`` in a test to script upstream map responses."""

    class Handler:
        def __init__(self):
            self.requests: List[httpx.Request] = []
            self.respond = lambda request: httpx.Response(500)

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.respond(request)

    return Handler()


@pytest.fixture
async def maps_client(maps_handler, cache):
    client = MapsClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(maps_handler)), cache=cache)
    yield client
    await client.close()


@pytest.fixture
async def app(session_factory, cache, fake_llm, maps_client):
    from tripplanner.main import app

    async def override_get_db():
        session = session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def override_get_cache():
        yield cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = override_get_cache
    app.dependency_overrides[get_llm_gateway] = lambda: fake_llm
    app.dependency_overrides[get_maps_client] = lambda: maps_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register(client):
    counter = {"n": 0}

    async def _register(name: Optional[str] = None, email: Optional[str] = None) -> Dict[str, Any]:
        counter["n"] += 1
        n = counter["n"]
        response = await client.post("/auth/register", json={
            "email": email or f"traveler{n}@example.com",
            "name": name or f"Traveler {n}",
            "password": "correct-horse",
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "user": body["user"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
        }

    return _register
