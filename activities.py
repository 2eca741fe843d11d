"""
Activity feed: the append-only notification log and the per-user view over it.

Writers append one document per like, comment or follow. Nothing is ever
updated in place; the feed is filtered, ordered and enriched at read time.
"""

import logging
from typing import Optional

from content import CONTENT_TYPES, find_item
from database import create_document, get_documents, now_ms
from directory import profile_map
from schemas import Activity

logger = logging.getLogger("flare.activities")


def target_owner(target: dict) -> Optional[str]:
    if target.get("type") == "user":
        return target.get("id")
    return target.get("user_id")


def append_activity(db, kind: str, actor: dict, target: dict, comment_content: Optional[str] = None,
                    timestamp: Optional[int] = None) -> Optional[dict]:
    """Record that `actor` acted on `target`. Returns None for self-actions."""
    if actor["id"] == target_owner(target):
        return None
    activity = Activity(
        type=kind,
        from_user={"id": actor["id"], "name": actor.get("name"), "avatar": actor.get("avatar")},
        target=target,
        comment_content=comment_content,
        timestamp=timestamp if timestamp is not None else now_ms(),
    )
    doc = create_document(db, "activity", activity)
    logger.info("%s activity %s from %s on %s %s", kind, doc["id"], actor["id"], target["type"], target["id"])
    return doc


def _feed_query(user_id: str) -> dict:
    return {"$or": [
        {"target.user_id": user_id},
        {"type": "follow", "target.id": user_id},
    ]}


def _enrich(db, activity: dict, users: dict) -> dict:
    target = activity.get("target") or {}
    if target.get("type") in CONTENT_TYPES:
        item = find_item(db, target["type"], target["id"])
        if item is not None:
            target = {**target, "media": item.get("media_url")}
        else:
            logger.debug("activity %s targets missing %s %s", activity["id"], target["type"], target["id"])
    from_user = activity.get("from_user") or {}
    live = users.get(from_user.get("id"))
    if live is not None:
        from_user = {"id": live["id"], "name": live["name"], "avatar": live["avatar"]}
    return {**activity, "from_user": from_user, "target": target}


def get_feed(db, user_id: str, limit: Optional[int] = None, offset: int = 0) -> list:
    # documents come back in insertion order, which the stable sort keeps for equal timestamps
    activities = get_documents(db, "activity", _feed_query(user_id))
    activities.sort(key=lambda a: a.get("timestamp", 0), reverse=True)
    page = activities[offset:offset + limit] if limit is not None else activities[offset:]
    users = profile_map(db, ((a.get("from_user") or {}).get("id") for a in page))
    return [_enrich(db, a, users) for a in page]
