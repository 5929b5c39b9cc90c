"""Shared test fixtures."""
from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import jwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from realtime_chat.api.deps import get_uow_factory
from realtime_chat.app import create_app
from realtime_chat.application.dto.principal import Principal
from realtime_chat.config import settings
from realtime_chat.domain.entities.message import Message
from realtime_chat.domain.entities.user import User
from realtime_chat.domain.value_objects.enums import MediaKind
from realtime_chat.infrastructure.ws.presence import PresenceRegistry


def make_user(*, user_id: UUID | None = None, full_name: str = "Alice Doe", profile_pic: str | None = None) -> User:
    return User(
        id=user_id or uuid.uuid4(),
        full_name=full_name,
        profile_pic=profile_pic,
        last_seen_at=None,
    )


def make_message(
    *,
    sender_id: UUID,
    receiver_id: UUID,
    text: str | None = "hello",
    read: bool = False,
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        receiver_id=receiver_id,
        text=text,
        image_url=None,
        video_url=None,
        created_at=created_at or datetime.now(timezone.utc),
        read=read,
    )


def wire_message(message: Message) -> dict[str, Any]:
    """A message as the REST API or a newMessage event carries it."""
    return {
        "id": str(message.id),
        "senderId": str(message.sender_id),
        "receiverId": str(message.receiver_id),
        "text": message.text,
        "imageUrl": message.image_url,
        "videoUrl": message.video_url,
        "read": message.read,
        "createdAt": message.created_at.isoformat(),
    }


def minutes_ago(n: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=n)


@dataclass
class FakeUserReader:
    _store: dict[UUID, User] = field(default_factory=dict)

    def add(self, user: User) -> User:
        self._store[user.id] = user
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._store.get(user_id)

    async def list_except(self, user_id: UUID) -> list[User]:
        users = [u for u in self._store.values() if u.id != user_id]
        return sorted(users, key=lambda u: (u.full_name, str(u.id)))


@dataclass
class FakeUserWriter:
    _reader: FakeUserReader
    _touched: list[tuple[UUID, datetime]] = field(default_factory=list)

    async def touch_last_seen(self, user_id: UUID, ts: datetime) -> None:
        self._touched.append((user_id, ts))
        user = self._reader._store.get(user_id)
        if user is not None:
            self._reader._store[user_id] = replace(user, last_seen_at=ts)


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)
    fail_aggregate: bool = False

    async def list_between(self, user_a: UUID, user_b: UUID) -> list[Message]:
        pair = {user_a, user_b}
        found = [m for m in self._messages if {m.sender_id, m.receiver_id} == pair]
        return sorted(found, key=lambda m: (m.created_at, m.id))

    async def unread_counts(self, receiver_id: UUID) -> dict[UUID, int]:
        if self.fail_aggregate:
            raise RuntimeError("aggregate failed")
        counts: dict[UUID, int] = {}
        for m in self._messages:
            if m.receiver_id == receiver_id and not m.read:
                counts[m.sender_id] = counts.get(m.sender_id, 0) + 1
        return counts


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader
    fail_mark_read: bool = False

    async def create(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        if self.fail_mark_read:
            raise RuntimeError("update failed")
        updated = 0
        for i, m in enumerate(self._reader._messages):
            if m.sender_id == sender_id and m.receiver_id == receiver_id and not m.read:
                self._reader._messages[i] = replace(m, read=True)
                updated += 1
        return updated


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    users: FakeUserReader = field(default_factory=FakeUserReader)
    users_w: FakeUserWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False
    _commits: int = 0

    def __post_init__(self) -> None:
        if self.users_w is None:
            self.users_w = FakeUserWriter(self.users)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def factory(self):
        """Stand-in for the per-operation UoW factory; always yields this UoW."""

        @asynccontextmanager
        async def _open() -> AsyncIterator[FakeUoW]:
            yield self

        return _open

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self._commits += 1

    async def rollback(self) -> None:
        pass


@dataclass
class FakeBus:
    """Records what would have gone out; only ``live`` ids accept sends."""
    live: set[str] = field(default_factory=set)
    sent: list[tuple[str, str, Any]] = field(default_factory=list)
    broadcasts: list[tuple[str, Any]] = field(default_factory=list)

    async def send(self, connection_id: str, event_type: str, data: Any) -> bool:
        if connection_id not in self.live:
            return False
        self.sent.append((connection_id, str(event_type), data))
        return True

    async def broadcast(self, event_type: str, data: Any) -> None:
        self.broadcasts.append((str(event_type), data))

    def sent_to(self, connection_id: str, event_type: str | None = None) -> list[Any]:
        return [
            data for cid, ev, data in self.sent
            if cid == connection_id and (event_type is None or ev == event_type)
        ]

    def broadcast_events(self, event_type: str) -> list[Any]:
        return [data for ev, data in self.broadcasts if ev == event_type]


class FakeUploader:
    def __init__(self) -> None:
        self.calls: list[tuple[str, MediaKind]] = []

    async def upload(self, data: str, kind: MediaKind) -> str:
        self.calls.append((data, kind))
        return f"https://media.example.com/{kind}/{len(self.calls)}"


class FakeRedis:
    """The two commands the rate limiter needs."""

    def __init__(self) -> None:
        self.values: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.values[key] = self.values.get(key, 0) + 1
        return self.values[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True


@pytest.fixture
def alice() -> User:
    return make_user(full_name="Alice Doe", profile_pic="https://img.example.com/alice.png")


@pytest.fixture
def bob() -> User:
    return make_user(full_name="Bob Roe")


@pytest.fixture
def alice_principal(alice: User) -> Principal:
    return Principal(user_id=alice.id)


@pytest.fixture
def bob_principal(bob: User) -> Principal:
    return Principal(user_id=bob.id)


@pytest.fixture
def uow(alice: User, bob: User) -> FakeUoW:
    uow = FakeUoW()
    uow.users.add(alice)
    uow.users.add(bob)
    return uow


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def presence() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader()


def make_token(user_id: UUID, claim: str = "sub") -> str:
    return jwt.encode({claim: str(user_id)}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth(user_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@asynccontextmanager
async def _no_lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield


@pytest.fixture
def app(uow: FakeUoW) -> FastAPI:
    """App wired to the in-memory UoW; Redis is left out (no rate limiter)."""
    app = create_app()
    app.router.lifespan_context = _no_lifespan
    app.dependency_overrides[get_uow_factory] = lambda: uow.factory()
    return app


@pytest.fixture
def client(app: FastAPI):
    # One shared portal, so every WebSocket session runs on the same loop.
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
