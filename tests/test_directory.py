import pytest

from directory import PLACEHOLDER_NAME, get_profile, login, profile_map, register, search, update_profile
from errors import InvalidArgument, NotFound, StoreUnavailable
from friendships import add_friendship


class TestProfiles:

    def test_placeholder_for_unknown(self, db):
        profile = get_profile(db, "ghost")
        assert profile["id"] == "ghost"
        assert profile["name"] == PLACEHOLDER_NAME

    def test_profile_map_skips_unknown(self, db, make_user):
        kim = make_user("kim")
        assert set(profile_map(db, [kim["id"], "ghost", None])) == {kim["id"]}


class TestAccounts:

    def test_register_and_login(self, db):
        user = register(db, "neo", "matrix", None)
        assert user["name"] == "neo"
        assert login(db, "neo", "matrix")["id"] == user["id"]
        assert login(db, "neo", "wrong") is None

    def test_duplicate_username(self, db):
        register(db, "neo", "matrix")
        with pytest.raises(InvalidArgument):
            register(db, "neo", "other")

    def test_update_profile(self, db, make_user):
        kim = make_user("kim")
        updated = update_profile(db, kim["id"], name="Kimberly")
        assert updated["name"] == "Kimberly"
        assert updated["avatar"] == kim["avatar"]
        with pytest.raises(NotFound):
            update_profile(db, "ghost", name="x")

    def test_search_excludes_self_and_friends(self, db, make_user):
        me = make_user("marta")
        friend = make_user("martin")
        stranger = make_user("marty")
        add_friendship(db, me["id"], friend["id"])

        assert [u["id"] for u in search(db, "MART", me["id"])] == [stranger["id"]]
        assert search(db, "m", me["id"]) == []


class TestFriendships:

    def test_follow_activity_once(self, db, make_user):
        a, b = make_user("a1"), make_user("b1")
        first = add_friendship(db, a["id"], b["id"])
        again = add_friendship(db, b["id"], a["id"])

        assert first["id"] == again["id"]
        assert db["friendship"].count_documents({}) == 1
        [activity] = list(db["activity"].find({}))
        assert activity["type"] == "follow"
        assert activity["target"]["id"] == b["id"]

    def test_invalid_pairs(self, db, make_user):
        a = make_user("a1")
        with pytest.raises(InvalidArgument):
            add_friendship(db, a["id"], a["id"])
        with pytest.raises(NotFound):
            add_friendship(db, a["id"], "ghost")

    def test_failed_activity_rolls_back_friendship(self, db, make_user, monkeypatch):
        a, b = make_user("a1"), make_user("b1")

        def broken(*args, **kwargs):
            raise StoreUnavailable("activity log down")

        monkeypatch.setattr("friendships.append_activity", broken)

        with pytest.raises(StoreUnavailable):
            add_friendship(db, a["id"], b["id"])
        assert db["friendship"].count_documents({}) == 0
        assert db["activity"].count_documents({}) == 0


class TestAccountEndpoints:

    def test_register_login_me(self, client):
        res = client.post("/api/register", json={"username": "trin", "password": "pw", "name": "Trinity"})
        assert res.status_code == 201
        user_id = res.json()["userId"]

        res = client.post("/api/login", json={"username": "trin", "password": "pw"})
        assert res.status_code == 200
        assert res.json()["userName"] == "Trinity"

        assert client.post("/api/login", json={"username": "trin", "password": "no"}).status_code == 401

        me = client.get(f"/api/me/{user_id}").json()
        assert me["username"] == "trin"
        assert "password" not in me

    def test_friend_route(self, client, make_user):
        a, b = make_user("a1"), make_user("b1")
        res = client.post("/api/friends", json={"userId": a["id"], "friendId": b["id"]})
        assert res.status_code == 201
        assert res.json()["user1Id"] == a["id"]
        assert client.get(f"/activities/{b['id']}").json()[0]["type"] == "follow"
