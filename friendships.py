import logging

from activities import append_activity
from database import create_document, get_document, now_ms, require_db, store_errors
from directory import get_profile, get_user
from errors import InvalidArgument, NotFound
from schemas import Friendship

logger = logging.getLogger("flare.friendships")


def add_friendship(db, user_id: str, friend_id: str) -> dict:
    """Befriend two users and notify the followed one.

    The pair is stored once regardless of who initiated it; repeating the
    call returns the existing pair without a second follow activity.
    """
    if user_id == friend_id:
        raise InvalidArgument("Cannot befriend yourself.")
    followed = get_user(db, friend_id)
    if get_user(db, user_id) is None or followed is None:
        raise NotFound("User not found.")

    existing = get_document(db, "friendship", {"$or": [
        {"user1_id": user_id, "user2_id": friend_id},
        {"user1_id": friend_id, "user2_id": user_id},
    ]})
    if existing:
        return existing

    doc = create_document(db, "friendship", Friendship(user1_id=user_id, user2_id=friend_id, timestamp=now_ms()))
    try:
        append_activity(db, "follow", get_profile(db, user_id),
                        {"type": "user", "id": friend_id, "name": followed.get("name")})
    except Exception:
        with store_errors("friendship rollback"):
            require_db(db)["friendship"].delete_one({"id": doc["id"]})
        raise
    logger.info("%s followed %s", user_id, friend_id)
    return doc
