"""User Directory: profile lookups and accounts."""

import logging
from random import randint
from typing import Iterable, Optional

from database import create_document, get_document, get_documents, require_db, store_errors
from errors import InvalidArgument, NotFound
from schemas import User

logger = logging.getLogger("flare.directory")

PLACEHOLDER_NAME = "Unknown_Unit"
PLACEHOLDER_AVATAR = "https://picsum.photos/id/1/50/50"
DEFAULT_AVATAR = "https://picsum.photos/id/{}/100/100"


def _profile(user: dict) -> dict:
    return {
        "id": user["id"],
        "username": user.get("username"),
        "name": user.get("name"),
        "avatar": user.get("avatar"),
    }


def placeholder_profile(user_id: str) -> dict:
    return {"id": user_id, "username": None, "name": PLACEHOLDER_NAME, "avatar": PLACEHOLDER_AVATAR}


def get_user(db, user_id: str) -> Optional[dict]:
    if not user_id:
        return None
    return get_document(db, "user", {"id": user_id})


def get_profile(db, user_id: str) -> dict:
    user = get_user(db, user_id)
    if user is None:
        logger.debug("unknown user %s, using placeholder profile", user_id)
        return placeholder_profile(user_id)
    return _profile(user)


def profile_map(db, user_ids: Iterable[str]) -> dict:
    ids = list({uid for uid in user_ids if uid})
    if not ids:
        return {}
    users = get_documents(db, "user", {"id": {"$in": ids}})
    return {u["id"]: _profile(u) for u in users}


def register(db, username: str, password: str, name: Optional[str] = None) -> dict:
    if not username or not password:
        raise InvalidArgument("Username and password are required.")
    if get_document(db, "user", {"username": username}):
        raise InvalidArgument("Username already taken.")
    user = User(username=username, password=password, name=name or username,
                avatar=DEFAULT_AVATAR.format(randint(1, 1000)))
    doc = create_document(db, "user", user)
    logger.info("registered user %s (%s)", doc["id"], username)
    return doc


def login(db, username: str, password: str) -> Optional[dict]:
    return get_document(db, "user", {"username": username, "password": password})


def update_profile(db, user_id: str, name: Optional[str] = None, avatar: Optional[str] = None) -> dict:
    user = get_user(db, user_id)
    if user is None:
        raise NotFound(f"User ID {user_id} not found.")
    changes = {}
    if name:
        changes["name"] = name
    if avatar:
        changes["avatar"] = avatar
    if changes:
        with store_errors("profile update"):
            require_db(db)["user"].update_one({"id": user_id}, {"$set": changes})
        user.update(changes)
    return user


def friend_ids(db, user_id: str) -> set:
    pairs = get_documents(db, "friendship", {"$or": [{"user1_id": user_id}, {"user2_id": user_id}]})
    return {f["user2_id"] if f["user1_id"] == user_id else f["user1_id"] for f in pairs}


def search(db, query: Optional[str], current_user_id: Optional[str]) -> list:
    if not query or len(query) < 2:
        return []
    needle = query.lower()
    excluded = friend_ids(db, current_user_id) if current_user_id else set()
    results = []
    for user in get_documents(db, "user"):
        if user["id"] == current_user_id or user["id"] in excluded:
            continue
        if needle in user.get("username", "").lower() or needle in (user.get("name") or "").lower():
            results.append(_profile(user))
    return results

