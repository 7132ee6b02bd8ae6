"""Import every ORM model so the metadata knows all tables."""

from commentable.comments.models import Comment, CommentableType
from commentable.moderation.models import Report, ReportCategory, ReportStatus
from commentable.posts.models import Post
from commentable.reactions.models import Reaction, ReactionType
from commentable.users.models import User
from commentable.videos.models import Video


__all__ = [
    "Comment",
    "CommentableType",
    "Post",
    "Reaction",
    "ReactionType",
    "Report",
    "ReportCategory",
    "ReportStatus",
    "User",
    "Video",
]
