import pytest

from errors import NotFound, StoreUnavailable
from likes import LikeResult, toggle_like


@pytest.fixture
def owner(make_user):
    return make_user("xavier")


@pytest.fixture
def fan(make_user):
    return make_user("yara")


class TestToggleLike:

    @pytest.mark.parametrize("content_type", ["post", "story", "video"])
    def test_like_then_unlike_restores_state(self, db, make_item, owner, fan, content_type):
        item = make_item(content_type, owner)

        assert toggle_like(db, content_type, item["id"], fan["id"]) == LikeResult(True, 1)
        assert toggle_like(db, content_type, item["id"], fan["id"]) == LikeResult(False, 0)

        stored = db[content_type].find_one({"id": item["id"]})
        assert stored["likes"] == []

    def test_first_like_appends_one_activity(self, db, make_item, owner, fan):
        post = make_item("post", owner, media_url="https://img.example/p.png")

        toggle_like(db, "post", post["id"], fan["id"])

        activities = list(db["activity"].find({}))
        assert len(activities) == 1
        activity = activities[0]
        assert activity["type"] == "like"
        assert activity["from_user"] == {"id": fan["id"], "name": fan["name"], "avatar": fan["avatar"]}
        assert activity["target"]["type"] == "post"
        assert activity["target"]["id"] == post["id"]
        assert activity["target"]["user_id"] == owner["id"]
        assert activity["target"]["owner_name"] == owner["name"]
        assert activity["target"]["media"] == "https://img.example/p.png"

    def test_unlike_appends_nothing(self, db, make_item, owner, fan):
        post = make_item("post", owner)
        toggle_like(db, "post", post["id"], fan["id"])
        toggle_like(db, "post", post["id"], fan["id"])

        assert db["activity"].count_documents({}) == 1

    def test_self_like_is_silent(self, db, make_item, owner):
        post = make_item("post", owner)

        assert toggle_like(db, "post", post["id"], owner["id"]) == LikeResult(True, 1)
        assert db["activity"].count_documents({}) == 0

    def test_relike_appends_again(self, db, make_item, owner, fan):
        video = make_item("video", owner)
        for _ in range(3):
            toggle_like(db, "video", video["id"], fan["id"])

        # like, unlike, like
        assert db["activity"].count_documents({}) == 2
        assert db["video"].find_one({"id": video["id"]})["likes"] == [fan["id"]]

    def test_counts_other_likers(self, db, make_item, make_user, owner, fan):
        other = make_user("zed")
        story = make_item("story", owner)

        toggle_like(db, "story", story["id"], fan["id"])
        assert toggle_like(db, "story", story["id"], other["id"]) == LikeResult(True, 2)
        assert toggle_like(db, "story", story["id"], fan["id"]) == LikeResult(False, 1)

    def test_missing_content(self, db, fan):
        with pytest.raises(NotFound):
            toggle_like(db, "post", "nope", fan["id"])

    def test_unknown_content_type(self, db, make_item, owner, fan):
        post = make_item("post", owner)
        with pytest.raises(NotFound):
            toggle_like(db, "reel", post["id"], fan["id"])

    def test_failed_activity_rolls_back_like(self, db, make_item, owner, fan, monkeypatch):
        post = make_item("post", owner)

        def broken(*args, **kwargs):
            raise StoreUnavailable("activity log down")

        monkeypatch.setattr("likes.append_activity", broken)

        with pytest.raises(StoreUnavailable):
            toggle_like(db, "post", post["id"], fan["id"])
        assert db["post"].find_one({"id": post["id"]})["likes"] == []


class TestLikeEndpoints:

    def test_toggle_route(self, client, make_item, owner, fan):
        post = make_item("post", owner)

        res = client.post(f"/like-toggle/post/{post['id']}", json={"userId": fan["id"]})
        assert res.status_code == 200
        assert res.json() == {"liked": True, "newLikesCount": 1}

        res = client.post(f"/like-toggle/post/{post['id']}", json={"userId": fan["id"]})
        assert res.json() == {"liked": False, "newLikesCount": 0}

    def test_toggle_route_missing_content(self, client, fan):
        res = client.post("/like-toggle/video/missing", json={"userId": fan["id"]})
        assert res.status_code == 404
        assert res.json()["detail"] == "Video not found."

    def test_legacy_story_route(self, client, make_item, owner, fan):
        story = make_item("story", owner)

        res = client.post(f"/api/stories/{story['id']}/like", json={"userId": fan["id"]})
        assert res.status_code == 200
        body = res.json()
        assert body["likedByUser"] is True
        assert body["newLikesCount"] == 1
        assert body["message"] == "Story liked successfully!"

    def test_toggle_route_missing_user_is_400(self, client, db, make_item, owner):
        post = make_item("post", owner)
        res = client.post(f"/like-toggle/post/{post['id']}", json={})
        assert res.status_code == 400
        assert db["post"].find_one({"id": post["id"]})["likes"] == []
