from __future__ import annotations

import copy

from pymongo.errors import PyMongoError

from database.mongo_client import MongoDBClient


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def find_one(self, query, projection=None):
        doc = self.docs.get(query["_id"])
        return copy.deepcopy(doc)

    def update_one(self, query, update, upsert=False):
        doc = self.docs.get(query["_id"])
        if doc is None:
            if not upsert:
                return
            doc = self.docs[query["_id"]] = {"_id": query["_id"], "items": {}}
        for field, value in update.get("$set", {}).items():
            if field.startswith("items."):
                doc["items"][field[len("items."):]] = value
            else:
                doc[field] = value
        for field in update.get("$unset", {}):
            doc["items"].pop(field[len("items."):], None)

    def delete_one(self, query):
        self.docs.pop(query["_id"], None)


class FailingCollection:
    def find_one(self, *_, **__):
        raise PyMongoError("down")

    def update_one(self, *_, **__):
        raise PyMongoError("down")

    def delete_one(self, *_, **__):
        raise PyMongoError("down")


def connected_client(collection) -> MongoDBClient:
    client = MongoDBClient(uri="")
    client.collection = collection
    client.connected = True
    return client


def test_memory_fallback_without_uri():
    client = MongoDBClient(uri="")

    assert client.connected is False
    assert client.get_item("s1", "chat_messages") is None
    client.set_item("s1", "chat_messages", "[]")
    assert client.get_item("s1", "chat_messages") == "[]"
    client.remove_item("s1", "chat_messages")
    assert client.get_item("s1", "chat_messages") is None


def test_clear_session_drops_all_keys():
    client = MongoDBClient(uri="")
    client.set_item("s1", "a", "1")
    client.set_item("s1", "b", "2")
    client.set_item("s2", "a", "3")

    client.clear_session("s1")

    assert client.get_item("s1", "a") is None
    assert client.get_item("s2", "a") == "3"


def test_connected_client_stores_items_per_session():
    collection = FakeCollection()
    client = connected_client(collection)

    client.set_item("s1", "chat_messages", '[{"text": "hi"}]')

    assert client.get_item("s1", "chat_messages") == '[{"text": "hi"}]'
    assert client.get_item("s2", "chat_messages") is None
    assert "updated_at" in collection.docs["s1"]

    client.remove_item("s1", "chat_messages")
    assert client.get_item("s1", "chat_messages") is None

    client.clear_session("s1")
    assert "s1" not in collection.docs


def test_database_errors_fall_back_to_memory():
    client = connected_client(FailingCollection())

    client.set_item("s1", "chat_messages", "[]")

    assert client.get_item("s1", "chat_messages") == "[]"
    client.clear_session("s1")


class FlakyCollection(FakeCollection):
    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def update_one(self, query, update, upsert=False):
        if self.fail_writes:
            raise PyMongoError("write failed")
        super().update_one(query, update, upsert)


def test_value_kept_in_memory_after_failed_write_wins():
    collection = FlakyCollection()
    client = connected_client(collection)
    client.set_item("s1", "chat_messages", "old")

    collection.fail_writes = True
    client.set_item("s1", "chat_messages", "new")

    assert client.get_item("s1", "chat_messages") == "new"

    collection.fail_writes = False
    client.set_item("s1", "chat_messages", "newest")

    assert client.get_item("s1", "chat_messages") == "newest"
    assert collection.docs["s1"]["items"]["chat_messages"] == "newest"
