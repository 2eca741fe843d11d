"""Content Store: posts, stories and videos with embedded like-sets and comments."""

import logging
from typing import Optional

from database import create_document, get_document, get_documents, now_ms, require_db, store_errors
from directory import placeholder_profile, profile_map
from errors import InvalidArgument, NotFound
from schemas import Post, Story, Video

logger = logging.getLogger("flare.content")

CONTENT_TYPES = ("post", "story", "video")
STORY_TTL_MS = 24 * 60 * 60 * 1000

_LABELS = {"post": "Post", "story": "Story", "video": "Video"}


def check_type(content_type: str) -> str:
    if content_type not in CONTENT_TYPES:
        raise NotFound(f"Unknown content type '{content_type}'.")
    return content_type


def get_item(db, content_type: str, content_id: str) -> dict:
    check_type(content_type)
    item = get_document(db, content_type, {"id": content_id})
    if item is None:
        raise NotFound(f"{_LABELS[content_type]} not found.")
    return item


def find_item(db, content_type: str, content_id: str) -> Optional[dict]:
    if content_type not in CONTENT_TYPES:
        return None
    return get_document(db, content_type, {"id": content_id})


def create_item(db, content_type: str, owner_id: str, media_url: Optional[str] = None,
                caption: Optional[str] = None, title: Optional[str] = None, media_type: str = "image") -> dict:
    check_type(content_type)
    if not owner_id:
        raise InvalidArgument("userId is required.")
    if not media_url:
        raise InvalidArgument("mediaUrl is required.")
    timestamp = now_ms()
    if content_type == "post":
        item = Post(user_id=owner_id, media_url=media_url, caption=caption, type=media_type, timestamp=timestamp)
    elif content_type == "story":
        item = Story(user_id=owner_id, media_url=media_url, type=media_type, timestamp=timestamp,
                     expires_at=timestamp + STORY_TTL_MS)
    else:
        item = Video(user_id=owner_id, media_url=media_url, timestamp=timestamp,
                     **({"title": title} if title else {}))
    doc = create_document(db, content_type, item)
    logger.info("created %s %s for %s", content_type, doc["id"], owner_id)
    return doc


def update_media(db, content_type: str, content_id: str, media_url: str) -> dict:
    item = get_item(db, content_type, content_id)
    with store_errors(f"{content_type} media update"):
        require_db(db)[content_type].update_one({"id": content_id}, {"$set": {"media_url": media_url}})
    item["media_url"] = media_url
    return item


def _with_counts(item: dict, users: dict) -> dict:
    return {
        **item,
        "likes_count": len(item.get("likes") or []),
        "comments_count": len(item.get("comments") or []),
        "user": users.get(item["user_id"]) or placeholder_profile(item["user_id"]),
    }


def list_items(db, content_type: str, owner_id: Optional[str] = None, now: Optional[int] = None) -> list:
    check_type(content_type)
    query = {"user_id": owner_id} if owner_id else {}
    if content_type == "story":
        query["expires_at"] = {"$gt": now if now is not None else now_ms()}
    items = get_documents(db, content_type, query)
    items.sort(key=lambda i: i["timestamp"], reverse=True)
    users = profile_map(db, (i["user_id"] for i in items))
    return [_with_counts(i, users) for i in items]


def list_active_stories(db, now: Optional[int] = None) -> list:
    """Active stories grouped by owner, owners with the newest story first."""
    stories = list_items(db, "story", now=now)
    groups = {}
    for story in stories:
        groups.setdefault(story["user_id"], []).append(story)
    ordered = sorted(groups.values(), key=lambda group: max(s["timestamp"] for s in group), reverse=True)
    return [{"user": group[0]["user"], "stories": group} for group in ordered]
