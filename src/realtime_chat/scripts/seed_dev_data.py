"""Seed development data: creates the tables, two users and a short thread."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from realtime_chat.domain.entities.message import Message
from realtime_chat.infrastructure.db.base import Base
from realtime_chat.infrastructure.db.models import UserModel
from realtime_chat.infrastructure.db.session import AsyncSessionLocal, engine
from realtime_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        alice = UserModel(id=uuid.uuid4(), email="alice@example.com", full_name="Alice Doe")
        bob = UserModel(id=uuid.uuid4(), email="bob@example.com", full_name="Bob Roe")
        session.add_all([alice, bob])
        await uow.flush()

        start = datetime.now(timezone.utc) - timedelta(minutes=5)
        thread = [
            (alice.id, bob.id, "Hi Bob!"),
            (bob.id, alice.id, "Hey Alice, what's up?"),
            (alice.id, bob.id, "Checking the new chat service."),
        ]
        for offset, (sender_id, receiver_id, text) in enumerate(thread):
            await uow.messages_w.create(
                Message(
                    id=uuid.uuid4(),
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    text=text,
                    image_url=None,
                    video_url=None,
                    created_at=start + timedelta(seconds=offset),
                )
            )

        await uow.commit()
        logger.info("Seeded users %s and %s with %d messages", alice.id, bob.id, len(thread))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
