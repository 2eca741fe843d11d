import logging
from typing import NamedTuple

from activities import append_activity
from content import get_item
from database import require_db, store_errors
from directory import get_profile, get_user

logger = logging.getLogger("flare.likes")


class LikeResult(NamedTuple):
    liked: bool
    like_count: int


def _target(content_type: str, item: dict, owner: dict) -> dict:
    return {
        "type": content_type,
        "id": item["id"],
        "media": item.get("media_url"),
        "user_id": item["user_id"],
        "owner_name": owner.get("name") if owner else None,
    }


def toggle_like(db, content_type: str, content_id: str, user_id: str) -> LikeResult:
    """Flip `user_id`'s membership in the item's like-set.

    A like by anyone other than the owner appends one `like` activity. If
    that append fails, the like is pulled again before the error propagates.
    """
    item = get_item(db, content_type, content_id)
    collection = require_db(db)[content_type]
    likes = item.get("likes") or []

    if user_id in likes:
        with store_errors(f"{content_type} unlike"):
            collection.update_one({"id": content_id}, {"$pull": {"likes": user_id}})
        count = len([uid for uid in likes if uid != user_id])
        logger.info("%s unliked %s %s (%d likes)", user_id, content_type, content_id, count)
        return LikeResult(False, count)

    with store_errors(f"{content_type} like"):
        collection.update_one({"id": content_id}, {"$addToSet": {"likes": user_id}})
    try:
        if user_id != item["user_id"]:
            owner = get_user(db, item["user_id"])
            append_activity(db, "like", get_profile(db, user_id), _target(content_type, item, owner))
    except Exception:
        with store_errors(f"{content_type} like rollback"):
            collection.update_one({"id": content_id}, {"$pull": {"likes": user_id}})
        raise
    count = len(likes) + 1
    logger.info("%s liked %s %s (%d likes)", user_id, content_type, content_id, count)
    return LikeResult(True, count)
