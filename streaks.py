"""
Streak counter: consecutive calendar days on which two users interacted.

A pair is stored once under its canonical key, the two ids in lexicographic
order joined by "_". Calendar days are taken in the server's local timezone.
"""

import logging
from datetime import datetime
from typing import Optional

from database import get_document, now_ms, require_db, store_errors
from schemas import Streak

logger = logging.getLogger("flare.streaks")

ONE_DAY_MS = 24 * 60 * 60 * 1000


def pair_key(user_a: str, user_b: str) -> str:
    first, second = sorted((user_a, user_b))
    return f"{first}_{second}"


def _local_date(timestamp_ms: int):
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def next_streak(current: int, last_ts: int, now: int) -> int:
    if current <= 0 or now - last_ts > ONE_DAY_MS:
        return 1
    if _local_date(now) != _local_date(last_ts):
        return current + 1
    return current


def get_streak(db, user_a: str, user_b: str) -> dict:
    key = pair_key(user_a, user_b)
    doc = get_document(db, "streak", {"id": key})
    if doc is None:
        return {"current_streak": 0, "last_interaction_timestamp": 0}
    return {
        "current_streak": doc.get("current_streak", 0),
        "last_interaction_timestamp": doc.get("last_interaction_timestamp", 0),
    }


def record_interaction(db, user_a: str, user_b: str, now: Optional[int] = None) -> dict:
    now = now if now is not None else now_ms()
    key = pair_key(user_a, user_b)
    current = get_streak(db, user_a, user_b)
    record = Streak(
        id=key,
        current_streak=next_streak(current["current_streak"], current["last_interaction_timestamp"], now),
        last_interaction_timestamp=now,
    )
    with store_errors("streak update"):
        require_db(db)["streak"].replace_one({"id": key}, record.model_dump(), upsert=True)
    logger.info("streak %s is now %d", key, record.current_streak)
    return record.model_dump(exclude={"id"})
