"""
Mongo access for the Flare backend.

`db` is a pymongo Database when DATABASE_URL is set and None otherwise.
Documents carry a string `id` next to Mongo's own `_id`; reads project `_id`
away so documents can be returned as-is.
"""

import logging
import os
import time
import uuid
from contextlib import contextmanager
from typing import Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from errors import StoreUnavailable

logger = logging.getLogger("flare.database")

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "flare")

NO_ID = {"_id": 0}

db = None
if DATABASE_URL:
    try:
        _client = MongoClient(DATABASE_URL, serverSelectionTimeoutMS=2000)
        db = _client[DATABASE_NAME]
    except PyMongoError as e:
        logger.error("could not configure Mongo client: %s", e)
        db = None


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def store_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error("store failure during %s: %s", operation, e)
        raise StoreUnavailable(f"Store unavailable during {operation}") from e


def require_db(database):
    if database is None:
        raise StoreUnavailable("Database not configured")
    return database


def create_document(database, collection_name: str, data) -> dict:
    """Insert a pydantic model or dict, stamping `id` and `timestamp` when absent."""
    doc = data.model_dump(mode="json") if hasattr(data, "model_dump") else dict(data)
    if not doc.get("id"):
        doc["id"] = new_id()
    if doc.get("timestamp") is None:
        doc["timestamp"] = now_ms()
    with store_errors(f"insert into {collection_name}"):
        require_db(database)[collection_name].insert_one(doc)
    doc.pop("_id", None)
    return doc


def get_documents(database, collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> list:
    with store_errors(f"read from {collection_name}"):
        cursor = require_db(database)[collection_name].find(filter_dict or {}, NO_ID).sort("_id", 1)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)


def get_document(database, collection_name: str, filter_dict: dict) -> Optional[dict]:
    with store_errors(f"read from {collection_name}"):
        return require_db(database)[collection_name].find_one(filter_dict, NO_ID)
