import logging
from typing import Optional

from database import create_document, get_documents, now_ms
from directory import get_user
from errors import InvalidArgument
from schemas import Message, ReadStatus

logger = logging.getLogger("flare.messages")

AUTO_REPLY_TEMPLATE = "(Response from {name}): Acknowledgment protocol initiated. Message received. 🤖"


def send_message(db, sender_id: str, conversation_id: str, content: Optional[str] = None,
                 media_url: Optional[str] = None) -> dict:
    if not sender_id or not conversation_id:
        raise InvalidArgument("senderId and conversationId are required.")
    if not content and not media_url:
        raise InvalidArgument("A message needs content or media.")
    message = Message(
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content or None,
        media_url=media_url,
        timestamp=now_ms(),
        read_status=ReadStatus.UNREAD,
    )
    doc = create_document(db, "message", message)
    logger.info("message %s from %s to %s", doc["id"], sender_id, conversation_id)
    return doc


def wants_auto_reply(db, message: dict) -> bool:
    if not message.get("content") or message["sender_id"] == message["conversation_id"]:
        return False
    return get_user(db, message["sender_id"]) is not None and get_user(db, message["conversation_id"]) is not None


def deliver_auto_reply(db, message: dict) -> Optional[dict]:
    recipient = get_user(db, message["conversation_id"])
    if recipient is None:
        return None
    reply = Message(
        conversation_id=message["sender_id"],
        sender_id=message["conversation_id"],
        content=AUTO_REPLY_TEMPLATE.format(name=recipient["name"]),
        timestamp=now_ms() + 1000,
    )
    doc = create_document(db, "message", reply)
    logger.info("auto-reply %s delivered to %s", doc["id"], message["sender_id"])
    return doc


def list_thread(db, user_id: str, partner_id: str) -> list:
    messages = get_documents(db, "message", {"$or": [
        {"sender_id": user_id, "conversation_id": partner_id},
        {"sender_id": partner_id, "conversation_id": user_id},
    ]})
    return sorted(messages, key=lambda m: m.get("timestamp", 0))
