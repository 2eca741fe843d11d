import logging
from random import choice, randint

from database import create_document, new_id, now_ms, require_db, store_errors
from schemas import Activity, BootstrapResponse, Comment, Friendship, Message, Post, ReadStatus, Story, User, Video
from streaks import pair_key

logger = logging.getLogger("flare.seed")

HOUR = 3600 * 1000
DAY = 24 * HOUR

SAMPLE_VIDEOS = ["/uploads/sample_video_1.mp4", "/uploads/sample_video_2.mp4"]


def _image(width: int, height: int) -> str:
    return f"https://picsum.photos/id/{randint(1, 1000)}/{width}/{height}"


def ensure_bootstrap(db) -> BootstrapResponse:
    """Fill an empty store with sample users and interactions.

    A store that already holds users is left as it is.
    """
    store = require_db(db)
    with store_errors("bootstrap check"):
        existing = store["user"].count_documents({})
    if existing:
        with store_errors("bootstrap check"):
            return BootstrapResponse(
                users=existing,
                posts=store["post"].count_documents({}),
                stories=store["story"].count_documents({}),
                videos=store["video"].count_documents({}),
            )

    now = now_ms()
    users = [
        create_document(db, "user", User(username=username, password=password, name=name, avatar=_image(100, 100)))
        for username, password, name in [
            ("devuser", "password", "Dev_User"),
            ("cyber_anna", "password1", "Anna_C"),
            ("digital_marco", "password2", "Marco_Z"),
            ("quantum_elena", "password3", "Elena_K"),
            ("code_luca", "password4", "Luca_G"),
        ]
    ]
    dev, anna, marco, elena, luca = users

    for friend in (anna, marco):
        create_document(db, "friendship", Friendship(user1_id=dev["id"], user2_id=friend["id"], timestamp=now))

    for sender, recipient, content, ago, status in [
        (dev, anna, "Cybernetic greetings, Anna. System status: optimal. 🚀", HOUR, ReadStatus.READ),
        (anna, dev, "Processor online, Dev_User! Initiating data transfer sequence. 💾", 3500000, ReadStatus.READ),
        (dev, marco, "Protocol Marco, any new digital artifacts found? 🖼️", 2 * HOUR, ReadStatus.READ),
        (marco, dev, "Affirmative! Accessing recent network captures. Ready for sync. ✨", 7100000, ReadStatus.READ),
        (elena, dev, "Quantum_Elena online. New data stream detected. Analysis complete. 📊", 60000, ReadStatus.UNREAD),
    ]:
        create_document(db, "message", Message(conversation_id=recipient["id"], sender_id=sender["id"],
                                               content=content, timestamp=now - ago, read_status=status))

    stories = [
        create_document(db, "story", Story(user_id=owner["id"], media_url=media, type=kind, timestamp=now - ago,
                                           expires_at=now + ttl, views_count=views))
        for owner, media, kind, ago, ttl, views in [
            (anna, _image(600, 1000), "image", 10000, 23 * HOUR, 15),
            (marco, _image(600, 1000), "image", 20000, 22 * HOUR, 20),
            (elena, SAMPLE_VIDEOS[0], "video", 15000, int(22.5 * HOUR), 10),
            (dev, _image(600, 1000), "image", 2000, int(23.9 * HOUR), 0),
        ]
    ]

    posts = []
    for owner, media, kind, caption, ago, comment in [
        (anna, _image(600, 400), "image", "Synthesized landscapes. Data visualization complete. #DigitalArt",
         5 * DAY, ("Amazing capture!", 4 * DAY)),
        (marco, SAMPLE_VIDEOS[1], "video", "New code compiled. Executing test sequence. #CodingLife", 2 * DAY, None),
        (elena, _image(600, 400), "image", "Neural network optimizations. Achieving peak performance. #AI",
         DAY, ("Deep learning in action!", DAY - 5000)),
        (dev, _image(600, 400), "image", "System online. Initializing social protocol. Hello, digital realm. ✨",
         0, None),
    ]:
        comments = [Comment(id=new_id(), user_id=dev["id"], content=comment[0], timestamp=now - comment[1])] if comment else []
        post = Post(user_id=owner["id"], media_url=media, type=kind, caption=caption, timestamp=now - ago,
                    comments=comments)
        posts.append(create_document(db, "post", post))

    videos = [
        create_document(db, "video", Video(user_id=owner["id"], media_url=choice(SAMPLE_VIDEOS), title=title,
                                           timestamp=now - ago, views_count=views))
        for owner, title, ago, views in [
            (anna, "Digital World Exploration Log 001", 12 * HOUR, 1500),
            (marco, "Binary Dance Protocol Activated", 2 * HOUR, 900),
            (elena, "Optimizing Human Performance: Beta Test", HOUR, 2500),
            (dev, "First Upload: Cybernetic Journey Begins", 1000, 0),
        ]
    ]

    pair = pair_key(dev["id"], anna["id"])
    with store_errors("bootstrap streak"):
        store["streak"].insert_one({"id": pair, "current_streak": 3, "last_interaction_timestamp": now - 12 * HOUR})

    dev_post, dev_story = posts[-1], stories[-1]

    def actor(user):
        return {"id": user["id"], "name": user["name"], "avatar": user["avatar"]}

    def on(kind, item):
        return {"type": kind, "id": item["id"], "media": item["media_url"], "user_id": dev["id"],
                "owner_name": dev["name"]}

    for activity in [
        Activity(type="like", from_user=actor(marco), target=on("post", dev_post), timestamp=now - 10000),
        Activity(type="follow", from_user=actor(elena), target={"type": "user", "id": dev["id"], "name": dev["name"]},
                 timestamp=now - 30000),
        Activity(type="comment", from_user=actor(anna), target=on("post", dev_post),
                 comment_content="Excellent data structure!", timestamp=now - 60000),
        Activity(type="like", from_user=actor(luca), target=on("story", dev_story), timestamp=now - 120000),
    ]:
        create_document(db, "activity", activity)

    logger.info("seeded store with %d users, %d posts, %d stories, %d videos",
                len(users), len(posts), len(stories), len(videos))
    return BootstrapResponse(users=len(users), posts=len(posts), stories=len(stories), videos=len(videos))
