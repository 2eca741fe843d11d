import mongomock
import pytest
from fastapi.testclient import TestClient

from database import create_document
from main import app, get_db, get_writer
from schemas import Post, Story, User, Video
from writer import StoreWriter


@pytest.fixture
def db():
    return mongomock.MongoClient().db


@pytest.fixture
def writer():
    w = StoreWriter()
    yield w
    w.shutdown()


@pytest.fixture
def client(db, writer):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_writer] = lambda: writer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username, name=None, avatar=None):
        return create_document(db, "user", User(
            username=username,
            password="secret",
            name=name or username.capitalize(),
            avatar=avatar or f"https://img.example/{username}.png",
        ))
    return _make


@pytest.fixture
def make_item(db):
    def _make(content_type, owner, media_url="https://img.example/media.png", timestamp=None, **extra):
        owner_id = owner["id"] if isinstance(owner, dict) else owner
        if content_type == "post":
            item = Post(user_id=owner_id, media_url=media_url, timestamp=timestamp, **extra)
        elif content_type == "story":
            extra.setdefault("expires_at", 4102444800000)
            item = Story(user_id=owner_id, media_url=media_url, timestamp=timestamp, **extra)
        else:
            item = Video(user_id=owner_id, media_url=media_url, timestamp=timestamp, **extra)
        return create_document(db, content_type, item)
    return _make
