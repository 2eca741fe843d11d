import logging

from database import get_documents
from directory import friend_ids, profile_map

logger = logging.getLogger("flare.contacts")


def _thread_query(user_id: str) -> dict:
    return {"$or": [{"sender_id": user_id}, {"conversation_id": user_id}]}


def get_contacts(db, user_id: str) -> list:
    """Friends and message partners of `user_id`, most recent conversation first.

    Friends never messaged carry a zero timestamp and sort last; equal
    timestamps fall back to id order.
    """
    last_seen = {uid: 0 for uid in friend_ids(db, user_id)}
    for msg in get_documents(db, "message", _thread_query(user_id)):
        other = msg["conversation_id"] if msg["sender_id"] == user_id else msg["sender_id"]
        ts = msg.get("timestamp") or 0
        if ts > last_seen.get(other, 0):
            last_seen[other] = ts
        else:
            last_seen.setdefault(other, 0)
    last_seen.pop(user_id, None)

    profiles = profile_map(db, last_seen)
    missing = set(last_seen) - set(profiles)
    if missing:
        logger.debug("dropping %d unknown contacts of %s", len(missing), user_id)
    contacts = [
        {**profiles[uid], "last_message_timestamp": last_seen[uid]}
        for uid in sorted(profiles)
    ]
    contacts.sort(key=lambda c: c["last_message_timestamp"], reverse=True)
    return contacts
