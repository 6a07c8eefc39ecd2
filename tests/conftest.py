from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from chatbot.conversation_manager import ConversationManager  # noqa: E402
from chatbot.message_store import MessageStore  # noqa: E402
from chatbot.prediction import FractureContext  # noqa: E402
from database.mongo_client import MongoDBClient  # noqa: E402

SESSION_ID = "session-0001"


@pytest.fixture
def storage() -> MongoDBClient:
    return MongoDBClient(uri="")


@pytest.fixture
def make_store(storage):
    def _make(session_id: str = SESSION_ID, **kwargs) -> MessageStore:
        kwargs.setdefault("typing_delay", 0)
        return MessageStore(storage, session_id, **kwargs)

    return _make


@pytest.fixture
def make_manager(make_store):
    def _make(body_part: str = "WRIST", confidence: float = 0.9, **kwargs) -> ConversationManager:
        return ConversationManager(FractureContext(body_part, confidence), make_store(**kwargs))

    return _make


@pytest.fixture
def settle():
    """Run every pending bot message to completion; returns the snapshots."""

    def _settle(store: MessageStore) -> list[list[dict]]:
        async def _collect():
            return [snapshot async for snapshot in store.drain()]

        return asyncio.run(_collect())

    return _settle
