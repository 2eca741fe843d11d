"""
Flare Database Schemas

Each Pydantic model below the request/response section corresponds to a
MongoDB collection. The collection name is the lowercase of the class name.
Documents are stored under the snake_case field names; over HTTP every model
reads and writes the camelCase aliases (`user_id` <-> `userId`).

Collections used:
- User: Accounts (also the User Directory)
- Friendship: Unordered pairs of befriended users
- Post: Feed posts (images/videos)
- Story: 24h ephemeral stories
- Video: Short vertical videos
- Message: Direct messages, addressed by the recipient id
- Activity: Notification events (like, comment, follow)
- Streak: Per-pair calendar-day interaction counters
"""

from enum import IntEnum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ContentType = Literal["post", "story", "video"]
ActivityType = Literal["like", "comment", "follow"]
TargetType = Literal["post", "story", "video", "user"]
MediaType = Literal["image", "video"]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadStatus(IntEnum):
    UNREAD = 0
    DELIVERED = 1
    READ = 2


# --- Collections ---

class User(ApiModel):
    id: Optional[str] = None
    username: str = Field(..., description="Unique login handle")
    password: str = Field(..., description="Stored as given; no hashing")
    name: str = Field(..., description="Display name")
    avatar: Optional[str] = Field(None, description="Avatar URL")


class Friendship(ApiModel):
    user1_id: str
    user2_id: str
    timestamp: Optional[int] = None


class Comment(ApiModel):
    id: Optional[str] = None
    user_id: str
    content: str
    timestamp: Optional[int] = None


class Post(ApiModel):
    id: Optional[str] = None
    user_id: str = Field(..., description="Owner id")
    media_url: str
    caption: Optional[str] = None
    type: MediaType = "image"
    timestamp: Optional[int] = None
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class Story(ApiModel):
    id: Optional[str] = None
    user_id: str
    media_url: str
    type: MediaType = "image"
    timestamp: Optional[int] = None
    expires_at: int = Field(..., description="Milliseconds since epoch when the story leaves active listings")
    views_count: int = Field(0, ge=0)
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class Video(ApiModel):
    id: Optional[str] = None
    user_id: str
    media_url: str
    title: str = "Untitled_Data_Stream"
    timestamp: Optional[int] = None
    views_count: int = Field(0, ge=0)
    likes: List[str] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class Message(ApiModel):
    id: Optional[str] = None
    conversation_id: str = Field(..., description="Recipient id, the other side of the 1:1 thread")
    sender_id: str
    content: Optional[str] = None
    media_url: Optional[str] = None
    timestamp: Optional[int] = None
    read_status: ReadStatus = ReadStatus.UNREAD


class FromUser(ApiModel):
    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class ActivityTarget(ApiModel):
    type: TargetType
    id: str
    media: Optional[str] = None
    user_id: Optional[str] = Field(None, description="Owner of the target content")
    owner_name: Optional[str] = None
    name: Optional[str] = None


class Activity(ApiModel):
    id: Optional[str] = None
    type: ActivityType
    from_user: FromUser
    target: ActivityTarget
    comment_content: Optional[str] = None
    timestamp: Optional[int] = None


class Streak(ApiModel):
    id: str = Field(..., description="Canonical pair key")
    current_streak: int = Field(0, ge=0)
    last_interaction_timestamp: int = 0


# --- Requests ---

class UserIdBody(ApiModel):
    user_id: str


class CommentBody(ApiModel):
    user_id: str
    content: Optional[str] = None


class StreakUpdateBody(ApiModel):
    user1_id: str
    user2_id: str


class RegisterBody(ApiModel):
    username: str
    password: str
    name: Optional[str] = None


class LoginBody(ApiModel):
    username: str
    password: str


class ProfileUpdateBody(ApiModel):
    user_id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class FriendshipBody(ApiModel):
    user_id: str
    friend_id: str


class MessageBody(ApiModel):
    conversation_id: str
    sender_id: str
    content: Optional[str] = None
    media_url: Optional[str] = None


class ContentBody(ApiModel):
    user_id: str
    media_url: Optional[str] = None
    caption: Optional[str] = None
    title: Optional[str] = None
    type: MediaType = "image"


# --- Responses ---

class Profile(ApiModel):
    id: str
    username: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None


class LoginResponse(ApiModel):
    message: str
    token: str
    user_id: str
    user_name: str
    user_avatar: Optional[str] = None


class LikeToggleResponse(ApiModel):
    liked: bool
    new_likes_count: int


class LegacyLikeResponse(LikeToggleResponse):
    message: str
    liked_by_user: bool


class CommentOut(Comment):
    user: Optional[Profile] = None


class StreakOut(ApiModel):
    current_streak: int
    last_interaction_timestamp: int


class Contact(Profile):
    last_message_timestamp: int = 0


class ContentOut(ApiModel):
    id: str
    user_id: str
    media_url: str
    type: Optional[MediaType] = None
    caption: Optional[str] = None
    title: Optional[str] = None
    timestamp: int
    expires_at: Optional[int] = None
    views_count: Optional[int] = None
    likes: List[str] = Field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    user: Optional[Profile] = None


class StoryGroup(ApiModel):
    user: Profile
    stories: List[ContentOut]


class BootstrapResponse(ApiModel):
    users: int
    posts: int
    stories: int
    videos: int
