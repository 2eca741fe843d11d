from fastapi.testclient import TestClient

from main import app, get_db, get_writer
from seed import ensure_bootstrap
from writer import StoreWriter


class TestBootstrap:

    def test_seeds_once(self, db):
        first = ensure_bootstrap(db)
        assert (first.users, first.posts, first.stories, first.videos) == (5, 4, 4, 4)
        again = ensure_bootstrap(db)
        assert again.users == 5
        assert db["user"].count_documents({}) == 5

    def test_seeded_dev_user_views(self, client, db):
        client.get("/api/bootstrap")
        dev = db["user"].find_one({"username": "devuser"})

        feed = client.get(f"/activities/{dev['id']}").json()
        assert [a["type"] for a in feed] == ["like", "follow", "comment", "like"]

        contacts = client.get(f"/contacts/{dev['id']}").json()
        assert [c["username"] for c in contacts] == ["quantum_elena", "cyber_anna", "digital_marco"]

        anna = db["user"].find_one({"username": "cyber_anna"})
        streak = client.get(f"/streak/{anna['id']}/{dev['id']}").json()
        assert streak["currentStreak"] == 3


class TestStoreUnavailable:

    def test_missing_database_is_503(self):
        writer = StoreWriter()
        app.dependency_overrides[get_db] = lambda: None
        app.dependency_overrides[get_writer] = lambda: writer
        try:
            client = TestClient(app)
            assert client.get("/activities/someone").status_code == 503
            assert client.post("/streak/update", json={"user1Id": "a", "user2Id": "b"}).status_code == 503
            assert client.post("/like-toggle/post/p1", json={"userId": "u"}).status_code == 503
        finally:
            app.dependency_overrides.clear()
            writer.shutdown()

    def test_root(self, client):
        assert client.get("/").json() == {"message": "Flare Backend Running"}
