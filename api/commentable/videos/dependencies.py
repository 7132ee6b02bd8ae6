from typing import Annotated

from fastapi import Depends

from commentable.core.database import DbSession

from .service import VideoService


async def get_video_service(session: DbSession) -> VideoService:
    return VideoService(session)


VideoServiceDep = Annotated[VideoService, Depends(get_video_service)]
