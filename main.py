import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import database
from activities import get_feed
from comments import add_comment, list_comments
from contacts import get_contacts
from content import create_item, list_active_stories, list_items
from directory import get_profile, get_user, login, register, search, update_profile
from errors import LedgerError, NotFound
from friendships import add_friendship
from likes import toggle_like
from messages import deliver_auto_reply, list_thread, send_message, wants_auto_reply
from schemas import (
    Activity, BootstrapResponse, CommentBody, CommentOut, Contact, ContentBody, ContentOut, Friendship,
    FriendshipBody, LegacyLikeResponse, LikeToggleResponse, LoginBody, LoginResponse, Message, MessageBody,
    Profile, ProfileUpdateBody, RegisterBody, StoryGroup, StreakOut, StreakUpdateBody, UserIdBody,
)
from seed import ensure_bootstrap
from streaks import get_streak, record_interaction
from writer import StoreWriter

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
AUTO_REPLY_DELAY_SECONDS = float(os.getenv("AUTO_REPLY_DELAY_SECONDS", "1.5"))

logger = logging.getLogger("flare")
if not logger.handlers:
    logger.setLevel(LOG_LEVEL)
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(_handler)

writer = StoreWriter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Flare backend starting (database %s)", "configured" if database.db is not None else "missing")
    yield
    logger.info("draining store writer")
    writer.shutdown()


app = FastAPI(title="Flare Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_db():
    return database.db


def get_writer() -> StoreWriter:
    return writer


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


_PLURALS = {"posts": "post", "stories": "story", "videos": "video"}


def _singular(collection: str) -> str:
    if collection not in _PLURALS:
        raise NotFound(f"Unknown collection '{collection}'.")
    return _PLURALS[collection]


@app.get("/")
def read_root():
    return {"message": "Flare Backend Running"}


@app.get("/api/bootstrap", response_model=BootstrapResponse)
def api_bootstrap(db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return writer.run(ensure_bootstrap, db)


# --- Interaction ledger ---

@app.post("/like-toggle/{content_type}/{content_id}", response_model=LikeToggleResponse)
def like_toggle(content_type: str, content_id: str, body: UserIdBody,
                db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    result = writer.run(toggle_like, db, content_type, content_id, body.user_id)
    return LikeToggleResponse(liked=result.liked, new_likes_count=result.like_count)


@app.post("/api/{collection}/{content_id}/like", response_model=LegacyLikeResponse)
def legacy_like(collection: str, content_id: str, body: UserIdBody,
                db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    content_type = _singular(collection)
    result = writer.run(toggle_like, db, content_type, content_id, body.user_id)
    action = "liked" if result.liked else "unliked"
    return LegacyLikeResponse(
        message=f"{content_type.capitalize()} {action} successfully!",
        liked=result.liked,
        liked_by_user=result.liked,
        new_likes_count=result.like_count,
    )


@app.get("/comments/{content_type}/{content_id}", response_model=List[CommentOut])
def get_comments(content_type: str, content_id: str, db=Depends(get_db)):
    return list_comments(db, content_type, content_id)


@app.post("/comments/{content_type}/{content_id}", response_model=CommentOut, status_code=201)
def post_comment(content_type: str, content_id: str, body: CommentBody,
                 db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    comment = writer.run(add_comment, db, content_type, content_id, body.user_id, body.content)
    return {**comment, "user": get_profile(db, body.user_id)}


@app.get("/api/{collection}/{content_id}/comments", response_model=List[CommentOut])
def legacy_get_comments(collection: str, content_id: str, db=Depends(get_db)):
    return list_comments(db, _singular(collection), content_id)


@app.post("/api/{collection}/{content_id}/comments", response_model=CommentOut, status_code=201)
def legacy_post_comment(collection: str, content_id: str, body: CommentBody,
                        db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return post_comment(_singular(collection), content_id, body, db, writer)


@app.get("/streak/{user_a}/{user_b}", response_model=StreakOut)
@app.get("/api/streaks/{user_a}/{user_b}", response_model=StreakOut)
def read_streak(user_a: str, user_b: str, db=Depends(get_db)):
    return get_streak(db, user_a, user_b)


@app.post("/streak/update", response_model=StreakOut)
@app.post("/api/streaks/update", response_model=StreakOut)
def update_streak(body: StreakUpdateBody, db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return writer.run(record_interaction, db, body.user1_id, body.user2_id)


@app.get("/activities/{user_id}", response_model=List[Activity])
@app.get("/api/activities/{user_id}", response_model=List[Activity])
def activities(user_id: str, limit: Optional[int] = None, offset: int = 0, db=Depends(get_db)):
    if (limit is not None and limit < 0) or offset < 0:
        raise HTTPException(status_code=400, detail="limit and offset must be non-negative")
    return get_feed(db, user_id, limit=limit, offset=offset)


@app.get("/contacts/{user_id}", response_model=List[Contact])
@app.get("/api/friends/{user_id}", response_model=List[Contact])
def contacts(user_id: str, db=Depends(get_db)):
    return get_contacts(db, user_id)


# --- Accounts ---

@app.post("/api/register", status_code=201)
def api_register(body: RegisterBody, db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    user = writer.run(register, db, body.username, body.password, body.name)
    return {"message": "User registered successfully. Please login.", "userId": user["id"]}


@app.post("/api/login", response_model=LoginResponse)
def api_login(body: LoginBody, db=Depends(get_db)):
    user = login(db, body.username, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    return LoginResponse(message="Login successful!", token="dummy-token-for-personal-app",
                         user_id=user["id"], user_name=user["name"], user_avatar=user.get("avatar"))


@app.get("/api/me/{user_id}", response_model=Profile)
def api_me(user_id: str, db=Depends(get_db)):
    user = get_user(db, user_id)
    if user is None:
        raise NotFound(f"User ID {user_id} not found.")
    return user


@app.post("/api/me/update", response_model=Profile)
def api_me_update(body: ProfileUpdateBody, db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return writer.run(update_profile, db, body.user_id, body.name, body.avatar)


@app.get("/api/users/search", response_model=List[Profile])
def api_search(query: Optional[str] = None, current_user_id: Optional[str] = Query(None, alias="currentUserId"), db=Depends(get_db)):
    return search(db, query, current_user_id)


@app.post("/api/friends", response_model=Friendship, status_code=201)
def api_add_friend(body: FriendshipBody, db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return writer.run(add_friendship, db, body.user_id, body.friend_id)


# --- Messages ---

@app.get("/api/messages/{partner_id}", response_model=List[Message])
def api_thread(partner_id: str, user_id: str = Query(..., alias="userId"), db=Depends(get_db)):
    return list_thread(db, user_id, partner_id)


@app.post("/api/messages", response_model=Message, status_code=201)
def api_send_message(body: MessageBody, db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    message = writer.run(send_message, db, body.sender_id, body.conversation_id, body.content, body.media_url)
    if AUTO_REPLY_DELAY_SECONDS > 0 and wants_auto_reply(db, message):
        writer.schedule(AUTO_REPLY_DELAY_SECONDS, deliver_auto_reply, db, message)
    return message


# --- Content ---

@app.get("/api/stories", response_model=List[StoryGroup])
def api_stories(db=Depends(get_db)):
    return list_active_stories(db)


@app.get("/api/{collection}", response_model=List[ContentOut])
def api_list_content(collection: str, user_id: Optional[str] = Query(None, alias="userId"), db=Depends(get_db)):
    return list_items(db, _singular(collection), owner_id=user_id)


@app.post("/api/{collection}", response_model=ContentOut, status_code=201)
def api_create_content(collection: str, body: ContentBody,
                       db=Depends(get_db), writer: StoreWriter = Depends(get_writer)):
    return writer.run(create_item, db, _singular(collection), body.user_id, body.media_url,
                      body.caption, body.title, body.type)


@app.get("/test")
def test_database(db=Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }
    if db is not None:
        response["database"] = "✅ Available"
        response["connection_status"] = "Connected"
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
        except Exception as e:
            logger.error("database check failed: %s", e)
            response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
