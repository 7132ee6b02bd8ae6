from typing import Annotated

from fastapi import Depends

from commentable.core.database import DbSession

from .service import PostService


async def get_post_service(session: DbSession) -> PostService:
    return PostService(session)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]
