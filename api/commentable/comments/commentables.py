"""Resolution of the polymorphic (commentable_type, commentable_id) pair."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from commentable.core.exceptions import NotFoundError
from commentable.core.status import is_visible
from commentable.posts.models import Post
from commentable.videos.models import Video

from .models import CommentableType


CommentableModel = Video | Post

COMMENTABLE_MODELS: dict[CommentableType, type[CommentableModel]] = {
    CommentableType.VIDEO: Video,
    CommentableType.POST: Post,
}


async def get_commentable(
    session: AsyncSession,
    commentable_type: CommentableType,
    commentable_id: UUID,
) -> CommentableModel | None:
    model = COMMENTABLE_MODELS[commentable_type]
    return await session.get(model, commentable_id)


async def require_open_commentable(
    session: AsyncSession,
    commentable_type: CommentableType,
    commentable_id: UUID,
) -> CommentableModel:
    """Return the commentable if it exists and still accepts comments.

    Raises:
        NotFoundError: If it is missing, deleted or removed
    """
    commentable = await get_commentable(session, commentable_type, commentable_id)
    if commentable is None or not is_visible(commentable.status):
        msg = f"{commentable_type.value.capitalize()} not found"
        raise NotFoundError(msg)
    return commentable
