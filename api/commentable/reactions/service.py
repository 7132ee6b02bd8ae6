"""Reaction service: one reaction per user per comment, with toggle semantics."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from commentable.auth.permissions import Capability
from commentable.auth.schemas import Actor
from commentable.comments.aggregation import reaction_counts, sync_reaction_counter
from commentable.comments.models import Comment
from commentable.config import get_settings
from commentable.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from commentable.core.logging import get_logger
from commentable.core.pagination import Page, PageParams, paginate
from commentable.core.rate_limit import RateLimiter
from commentable.core.status import is_visible

from .models import Reaction, ReactionType
from .schemas import ReactionResponse, ReactionSummary


logger = get_logger(__name__)


class ReactionService:
    """Service for comment reactions."""

    def __init__(self, session: AsyncSession, rate_limiter: RateLimiter | None = None):
        self.session = session
        self.rate_limiter = rate_limiter or RateLimiter()
        self.settings = get_settings()

    async def find_reaction(self, user_id: UUID, comment_id: UUID) -> Reaction | None:
        return await self.session.scalar(
            select(Reaction).where(
                Reaction.user_id == user_id,
                Reaction.comment_id == comment_id,
            )
        )

    async def _require_comment(self, comment_id: UUID) -> Comment:
        comment = await self.session.get(Comment, comment_id)
        if comment is None or not is_visible(comment.status):
            msg = "Comment not found"
            raise NotFoundError(msg)
        return comment

    async def upsert(
        self,
        actor: Actor,
        comment_id: UUID,
        reaction_type: ReactionType,
    ) -> Reaction | None:
        """Set the actor's reaction on a comment.

        - no reaction yet: create it
        - same type as the existing one: delete it (toggle off), return None
        - different type: update the existing row in place

        A concurrent upsert that wins the insert race is not an error: the
        transaction is rolled back and the winner's row is updated to
        ``reaction_type``.

        Raises:
            NotFoundError: If the comment does not exist or is hidden
        """
        actor.require(Capability.REACT, "You are not allowed to react")
        await self.rate_limiter.hit(
            "reactions", actor.id, self.settings.rate_limit_reactions_per_minute, 60
        )
        await self._require_comment(comment_id)

        existing = await self.find_reaction(actor.id, comment_id)
        if existing is not None:
            if existing.reaction_type == reaction_type:
                await self.session.delete(existing)
                await sync_reaction_counter(self.session, comment_id)
                await self.session.commit()
                logger.info(
                    "reaction_removed",
                    comment_id=str(comment_id),
                    reaction_type=reaction_type.value,
                )
                return None

            previous = existing.reaction_type
            existing.reaction_type = reaction_type
            await self.session.commit()
            logger.info(
                "reaction_changed",
                comment_id=str(comment_id),
                previous=previous.value,
                reaction_type=reaction_type.value,
            )
            return existing

        reaction = Reaction(
            user_id=actor.id,
            comment_id=comment_id,
            reaction_type=reaction_type,
        )
        self.session.add(reaction)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            logger.info("reaction_insert_conflict", comment_id=str(comment_id))
            return await self._update_existing(actor.id, comment_id, reaction_type)

        await sync_reaction_counter(self.session, comment_id)
        await self.session.commit()
        logger.info(
            "reaction_added",
            comment_id=str(comment_id),
            reaction_type=reaction_type.value,
        )
        return reaction

    async def _update_existing(
        self,
        user_id: UUID,
        comment_id: UUID,
        reaction_type: ReactionType,
    ) -> Reaction:
        existing = await self.find_reaction(user_id, comment_id)
        if existing is None:
            msg = "Reaction changed concurrently, please retry"
            raise ConflictError(msg)

        if existing.reaction_type != reaction_type:
            existing.reaction_type = reaction_type
        await sync_reaction_counter(self.session, comment_id)
        await self.session.commit()
        return existing

    async def summary(self, comment_id: UUID) -> ReactionSummary:
        """Reaction counts per type for one comment."""
        counts = await reaction_counts(self.session, [comment_id])
        return ReactionSummary.from_counts(counts.get(comment_id))

    async def list_reactions(
        self,
        params: PageParams,
        comment_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> Page[ReactionResponse]:
        stmt = select(Reaction)
        if comment_id is not None:
            stmt = stmt.where(Reaction.comment_id == comment_id)
        if user_id is not None:
            stmt = stmt.where(Reaction.user_id == user_id)

        reactions, total = await paginate(
            self.session,
            stmt,
            params,
            sort_columns={
                "created_at": Reaction.created_at,
                "updated_at": Reaction.updated_at,
            },
            default_sort="created_at",
            tiebreaker=Reaction.id,
        )
        items = [ReactionResponse.model_validate(reaction) for reaction in reactions]
        return Page[ReactionResponse].create(items, total, params)

    async def get_reaction(self, reaction_id: UUID) -> Reaction:
        reaction = await self.session.get(Reaction, reaction_id)
        if reaction is None:
            msg = "Reaction not found"
            raise NotFoundError(msg)
        return reaction

    async def delete_reaction(self, actor: Actor, reaction_id: UUID) -> None:
        """Hard delete one of the actor's reactions."""
        reaction = await self.get_reaction(reaction_id)
        if not actor.owns(reaction.user_id):
            msg = "You can only remove your own reactions"
            raise PermissionDeniedError(msg)

        comment_id = reaction.comment_id
        await self.session.delete(reaction)
        await sync_reaction_counter(self.session, comment_id)
        await self.session.commit()
        logger.info("reaction_deleted", reaction_id=str(reaction_id))
