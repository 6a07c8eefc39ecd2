"""
MongoDB Client for Chat Session Storage.

A small session-scoped key/value store:
  - One document per browser session, string values keyed by name
  - TTL index so abandoned sessions expire on their own
  - Graceful fallback to process memory when MongoDB is not available
"""

from datetime import datetime, timezone
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
import config


class MongoDBClient:
    """Manages MongoDB connections and per-session key/value items."""

    def __init__(self, uri: str | None = None):
        self.uri = config.MONGODB_URI if uri is None else uri
        self.db_name = config.MONGODB_DB_NAME
        self.collection_name = config.MONGODB_COLLECTION
        self.client = None
        self.db = None
        self.collection = None
        self.connected = False
        # session_id -> {key: value}; used whenever MongoDB is unavailable
        self._memory: dict[str, dict[str, str]] = {}

        if self.uri:
            self._connect()
        else:
            print("[MongoDB] ⚠️ No MONGODB_URI set — sessions are kept in memory")

    def _connect(self):
        """Establish MongoDB connection and ensure the TTL index exists."""
        try:
            self.client = MongoClient(
                self.uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
            )
            # Test the connection
            self.client.admin.command("ping")
            self.db = self.client[self.db_name]
            self.collection = self.db[self.collection_name]
            self.collection.create_index(
                "updated_at", expireAfterSeconds=config.SESSION_TTL_SECONDS
            )
            self.connected = True
            print(f"[MongoDB] ✅ Connected to database: {self.db_name}")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            print(f"[MongoDB] ❌ Connection failed: {e}")
            self.connected = False
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Unexpected error: {e}")
            self.connected = False

    def get_item(self, session_id: str, key: str) -> str | None:
        """Return the stored value for a key, or None when absent."""
        # A value kept in memory after a failed write is newer than MongoDB's.
        cached = self._memory.get(session_id, {}).get(key)
        if cached is not None or not self.connected:
            return cached

        try:
            doc = self.collection.find_one({"_id": session_id}, {f"items.{key}": 1})
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to read {key!r}: {e}")
            return None
        if not doc:
            return None
        return doc.get("items", {}).get(key)

    def set_item(self, session_id: str, key: str, value: str) -> None:
        """Overwrite a key with a new value."""
        if self.connected:
            try:
                self.collection.update_one(
                    {"_id": session_id},
                    {"$set": {
                        f"items.{key}": value,
                        "updated_at": datetime.now(timezone.utc),
                    }},
                    upsert=True,
                )
                self._memory.get(session_id, {}).pop(key, None)
                return
            except PyMongoError as e:
                print(f"[MongoDB] ❌ Failed to save {key!r}, keeping it in memory: {e}")

        self._memory.setdefault(session_id, {})[key] = value

    def remove_item(self, session_id: str, key: str) -> None:
        """Delete a key if it exists."""
        self._memory.get(session_id, {}).pop(key, None)
        if not self.connected:
            return
        try:
            self.collection.update_one({"_id": session_id}, {"$unset": {f"items.{key}": ""}})
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to remove {key!r}: {e}")

    def clear_session(self, session_id: str) -> None:
        """Drop everything stored for a browser session."""
        self._memory.pop(session_id, None)
        if not self.connected:
            return
        try:
            self.collection.delete_one({"_id": session_id})
        except PyMongoError as e:
            print(f"[MongoDB] ❌ Failed to clear session {session_id[-8:]}: {e}")

    def close(self):
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()
            self.connected = False
            print("[MongoDB] Connection closed.")
