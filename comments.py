import logging

from activities import append_activity
from content import get_item
from database import new_id, now_ms, require_db, store_errors
from directory import get_profile, get_user, placeholder_profile, profile_map
from errors import InvalidArgument
from schemas import Comment

logger = logging.getLogger("flare.comments")


def add_comment(db, content_type: str, content_id: str, author_id: str, text) -> dict:
    item = get_item(db, content_type, content_id)
    if not text or not str(text).strip():
        raise InvalidArgument("Comment content cannot be empty.")

    comment = Comment(id=new_id(), user_id=author_id, content=text, timestamp=now_ms()).model_dump()
    collection = require_db(db)[content_type]
    with store_errors(f"{content_type} comment"):
        collection.update_one({"id": content_id}, {"$push": {"comments": comment}})
    try:
        if author_id != item["user_id"]:
            owner = get_user(db, item["user_id"])
            append_activity(
                db, "comment", get_profile(db, author_id),
                {
                    "type": content_type,
                    "id": item["id"],
                    "media": item.get("media_url"),
                    "user_id": item["user_id"],
                    "owner_name": owner.get("name") if owner else None,
                },
                comment_content=text,
                timestamp=comment["timestamp"],
            )
    except Exception:
        with store_errors(f"{content_type} comment rollback"):
            collection.update_one({"id": content_id}, {"$pull": {"comments": {"id": comment["id"]}}})
        raise
    logger.info("%s commented on %s %s", author_id, content_type, content_id)
    return comment


def list_comments(db, content_type: str, content_id: str) -> list:
    """Comments oldest first, each joined with its author's current profile."""
    item = get_item(db, content_type, content_id)
    comments = sorted(item.get("comments") or [], key=lambda c: c.get("timestamp", 0))
    users = profile_map(db, (c.get("user_id") for c in comments))
    return [
        {**c, "user": users.get(c.get("user_id")) or placeholder_profile(c.get("user_id"))}
        for c in comments
    ]
