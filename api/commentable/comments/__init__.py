"""Comment system module.

Provides threaded comments on videos and posts with:
- Replies up to a configurable depth
- Recomputed reply counts and reaction summaries
- Masking of deleted and removed content

Note: Router is not exported here to avoid circular imports.
Import directly from commentable.comments.router when needed.
"""

from .models import Comment, CommentableType


__all__ = ["Comment", "CommentableType"]
