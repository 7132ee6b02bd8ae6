"""Reports and moderation.

Provides:
- Comment reports with one report per user per comment
- Automatic flagging once enough reports are pending
- Report review linked to the reported comment's status
- Moderator status changes on videos, posts, comments and users
"""

from .models import REVIEW_OUTCOMES, Report, ReportCategory, ReportStatus


__all__ = [
    "REVIEW_OUTCOMES",
    "Report",
    "ReportCategory",
    "ReportStatus",
]
