"""Data access layer: repositories take the session they operate on."""

from socialhub.repositories.account_directory import AccountDirectory, OwnerSet
from socialhub.repositories.base import BaseRepository
from socialhub.repositories.comment_repository import CommentRepository
from socialhub.repositories.content_store import LIKES, STORY_VIEWS, ContentStore, EdgeSet
from socialhub.repositories.hashtag_repository import HashtagRepository
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.notification_repository import NotificationRepository

__all__ = [
    "AccountDirectory",
    "BaseRepository",
    "CommentRepository",
    "ContentStore",
    "EdgeSet",
    "HashtagRepository",
    "LIKES",
    "MessageRepository",
    "NotificationRepository",
    "OwnerSet",
    "STORY_VIEWS",
]
