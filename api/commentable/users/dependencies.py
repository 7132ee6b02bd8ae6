from typing import Annotated

from fastapi import Depends

from commentable.core.database import DbSession

from .service import UserService


async def get_user_service(session: DbSession) -> UserService:
    return UserService(session)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
