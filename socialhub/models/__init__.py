"""ORM models. Importing this package registers every table on Base.metadata."""

from socialhub.models.account import Account, Follow
from socialhub.models.comment import Comment
from socialhub.models.message import Message
from socialhub.models.notification import Notification, NotificationKind
from socialhub.models.post import Hashtag, Post, PostHashtag, PostLike, PostMention
from socialhub.models.story import Story, StoryView

__all__ = [
    "Account",
    "Follow",
    "Comment",
    "Message",
    "Notification",
    "NotificationKind",
    "Hashtag",
    "Post",
    "PostHashtag",
    "PostLike",
    "PostMention",
    "Story",
    "StoryView",
]
