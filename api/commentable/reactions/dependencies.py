from typing import Annotated

from fastapi import Depends

from commentable.core.database import DbSession
from commentable.core.rate_limit import RateLimiterDep

from .service import ReactionService


async def get_reaction_service(
    session: DbSession,
    rate_limiter: RateLimiterDep,
) -> ReactionService:
    return ReactionService(session, rate_limiter)


ReactionServiceDep = Annotated[ReactionService, Depends(get_reaction_service)]
