"""
Pytest configuration and fixtures for BranchChat tests.

Provides a throwaway SQLite database per test, service-level sessions, an
HTTP client bound to the FastAPI app, and a fake upstream server that speaks
both the OpenAI-compatible and the Google wire formats.
"""

import asyncio
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from branchchat import models  # noqa: F401
from branchchat.config import settings
from branchchat.database import Base, configure_sqlite, get_db
from branchchat.main import app
from branchchat.models import Conversation
from branchchat.services.conversation_service import ConversationService
from branchchat.services.message_service import MessageService
from branchchat.utils.security import create_access_token


USER_ID = "user-1"
OTHER_USER_ID = "user-2"
VALID_KEY = "sk-valid"


@pytest.fixture
async def engine(tmp_path):
    """SQLite database file private to one test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_conversation(db_session: AsyncSession):
    """
    Factory creating a conversation and appending messages to it.

    Messages are ``(role, content)`` or ``(role, content, provider, model)`` tuples.
    """

    async def _make(
        messages: Optional[List[Tuple]] = None,
        user_id: str = USER_ID,
        title: Optional[str] = None
    ) -> Conversation:
        conversation = await ConversationService(db_session).create(user_id, title)
        message_log = MessageService(db_session)
        for entry in messages or []:
            role, content = entry[0], entry[1]
            provider = entry[2] if len(entry) > 2 else None
            model = entry[3] if len(entry) > 3 else None
            await message_log.append(
                conversation.id, user_id, content, role, provider=provider, model=model
            )
        await db_session.refresh(conversation)
        # End the read transaction so other sessions can write
        await db_session.commit()
        return conversation

    return _make


class FakeUpstream:
    """Records provider requests and answers like the real APIs would."""

    def __init__(self):
        self.valid_keys = {VALID_KEY}
        self.reply = "Hello from upstream"
        self.fail_status: Optional[int] = None
        # True, or one of "html" / "no_message" for the chat completions route
        self.malformed = False
        self.delay = 0.0
        self.requests: List[Dict] = []

    async def _rejection(self, key: str) -> Optional[web.Response]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_status is not None:
            return web.Response(status=self.fail_status, text="upstream exploded")
        if key not in self.valid_keys:
            return web.Response(status=401, text="invalid api key")
        return None

    async def chat_completions(self, request: web.Request) -> web.Response:
        body = await request.json()
        auth = request.headers.get("Authorization", "")
        key = auth[len("Bearer "):] if auth.startswith("Bearer ") else ""
        self.requests.append({"format": "openai", "key": key, "body": body})

        rejection = await self._rejection(key)
        if rejection is not None:
            return rejection
        if self.malformed == "html":
            return web.Response(text="<html>gateway</html>", content_type="text/html")
        if self.malformed == "no_message":
            return web.json_response({"id": "chatcmpl-test", "choices": [{"index": 0}]})
        if self.malformed:
            return web.json_response({"id": "chatcmpl-test", "choices": []})

        return web.json_response({
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": body["model"],
            "choices": [{
                "index": 0,
                "message": {"role": "assistant", "content": self.reply},
                "finish_reason": "stop",
            }],
        })

    async def generate_content(self, request: web.Request) -> web.Response:
        body = await request.json()
        key = request.query.get("key", "")
        model, _, method = request.match_info["target"].partition(":")
        self.requests.append({
            "format": "google", "key": key, "model": model, "method": method, "body": body
        })

        rejection = await self._rejection(key)
        if rejection is not None:
            return rejection
        if self.malformed:
            return web.json_response({"candidates": []})

        return web.json_response({
            "candidates": [{"content": {"role": "model", "parts": [{"text": self.reply}]}}]
        })


@pytest.fixture
async def upstream(monkeypatch):
    """Fake provider server; every registry provider is pointed at it."""
    fake = FakeUpstream()
    upstream_app = web.Application()
    upstream_app.router.add_post("/v1/chat/completions", fake.chat_completions)
    upstream_app.router.add_post("/v1beta/models/{target}", fake.generate_content)

    async with TestServer(upstream_app) as server:
        openai_base = str(server.make_url("/v1"))
        monkeypatch.setattr(settings, "PROVIDER_BASE_URLS", {
            "openai": openai_base,
            "groq": openai_base,
            "deepseek": openai_base,
            "google": str(server.make_url("/v1beta")),
        })
        yield fake


@pytest.fixture
async def api_client(session_factory):
    """HTTP client for the FastAPI app with get_db bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}


@pytest.fixture
def other_auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}
