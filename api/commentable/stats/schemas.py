from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Platform totals plus the caller's own counts."""

    total_videos: int = 0
    total_posts: int = 0
    total_comments: int = 0
    total_reactions: int = 0
    my_videos: int = 0
    my_posts: int = 0
    my_comments: int = 0
    pending_reports: int = 0
    flagged_comments: int = 0
