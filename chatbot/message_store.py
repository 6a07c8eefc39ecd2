"""
Message Store — ordered chat log with deferred bot messages.

Bot messages are not appended directly. They go onto a single FIFO queue
and are resolved one at a time by `drain()`:

  queue ──▶ "Typing..." placeholder ──(typing delay)──▶ final entry

Only one placeholder exists at any moment, so the final order of the log
is always the order in which messages were requested. User messages skip
the queue when it is idle and wait their turn otherwise.

Persistence writes two keys per session:
  - CHAT_MESSAGES_KEY: resolved entries only (never a placeholder)
  - CHAT_PENDING_KEY:  the entry being resolved plus everything queued,
                       re-queued on restore so a reload resumes the typing
"""

import asyncio
from collections import deque
from typing import AsyncIterator

from chatbot.messages import (
    dumps_messages,
    loads_messages,
    make_message,
    typing_placeholder,
)
from database.mongo_client import MongoDBClient
import config


class MessageStore:
    """Append-only message log for one browser session."""

    def __init__(
        self,
        storage: MongoDBClient,
        session_id: str,
        typing_delay: float = config.TYPING_DELAY_SECONDS,
        sleep=asyncio.sleep,
    ):
        self.storage = storage
        self.session_id = session_id
        self.typing_delay = typing_delay
        self._sleep = sleep
        self._queue: deque[dict] = deque()
        self._resolving: dict | None = None
        self._lock = asyncio.Lock()
        self.messages: list[dict] = self.restore()

    # ── Persistence ────────────────────────────────────────────────────

    def restore(self) -> list[dict]:
        """Load resolved messages and re-queue anything left pending."""
        messages = loads_messages(
            self.storage.get_item(self.session_id, config.CHAT_MESSAGES_KEY)
        )
        pending = loads_messages(
            self.storage.get_item(self.session_id, config.CHAT_PENDING_KEY)
        )
        self._queue.extend(pending)
        if messages or pending:
            print(
                f"[Session] Restored {len(messages)} message(s), "
                f"{len(pending)} pending for session {self.session_id[-8:]}"
            )
        return messages

    def persist(self) -> None:
        """Overwrite the stored snapshot with the current log and queue."""
        self.storage.set_item(
            self.session_id, config.CHAT_MESSAGES_KEY, dumps_messages(self.messages)
        )
        pending = list(self._queue)
        if self._resolving is not None:
            pending.insert(0, self._resolving)
        if pending:
            self.storage.set_item(
                self.session_id, config.CHAT_PENDING_KEY, dumps_messages(pending)
            )
        else:
            self.storage.remove_item(self.session_id, config.CHAT_PENDING_KEY)

    # ── Appending ──────────────────────────────────────────────────────

    @property
    def has_pending(self) -> bool:
        return bool(self._queue) or self._resolving is not None

    def append(self, entry: dict) -> None:
        """Append a resolved entry to the end of the log."""
        self.messages.append(entry)
        self.persist()

    def append_user_message(self, text: str, kind: str | None = None) -> None:
        """Append a user entry now, or after the bot entries already queued."""
        entry = make_message(text, "user", kind)
        if self.has_pending:
            self._queue.append(entry)
            self.persist()
        else:
            self.append(entry)

    def append_bot_message(
        self,
        text: str,
        kind: str | None = None,
        is_markup: bool = False,
        link: str | None = None,
    ) -> None:
        """Queue a bot entry; it appears after the typing delay in drain()."""
        self._queue.append(make_message(text, "bot", kind, is_markup, link))
        self.persist()

    def snapshot(self) -> list[dict]:
        return list(self.messages)

    # ── Deferred resolution ────────────────────────────────────────────

    async def drain(self) -> AsyncIterator[list[dict]]:
        """
        Resolve queued entries in FIFO order, yielding a snapshot after each
        visible change. Always yields at least once.
        """
        async with self._lock:
            while self._queue:
                entry = self._queue.popleft()
                if entry["sender"] == "user":
                    self.append(entry)
                    yield self.snapshot()
                    continue

                self._resolving = entry
                self.messages.append(typing_placeholder())
                index = len(self.messages) - 1
                resolved = False
                try:
                    yield self.snapshot()
                    await self._sleep(self.typing_delay)
                    self.messages[index] = entry
                    resolved = True
                finally:
                    self._resolving = None
                    if not resolved:
                        # Interrupted mid-delay: the next drain starts over.
                        del self.messages[index]
                        self._queue.appendleft(entry)
                self.persist()
                yield self.snapshot()
        yield self.snapshot()

    def close(self) -> None:
        """Forget in-memory state; the stored copy expires with the session."""
        self._queue.clear()
        self._resolving = None
