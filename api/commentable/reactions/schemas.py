"""Pydantic schemas for reactions."""

from collections.abc import Mapping
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .models import ReactionType


class UpsertReactionRequest(BaseModel):
    """Set, change or toggle off the caller's reaction on a comment."""

    comment_id: UUID
    reaction_type: ReactionType


class ReactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    comment_id: UUID
    reaction_type: ReactionType
    created_at: datetime
    updated_at: datetime


class UpsertReactionResponse(BaseModel):
    """Outcome of an upsert; ``reaction`` is null when it was toggled off."""

    reaction: ReactionResponse | None = None
    summary: "ReactionSummary"


class ReactionSummary(BaseModel):
    """Reaction counts for a comment."""

    like: int = 0
    dislike: int = 0
    love: int = 0
    clap: int = 0
    laugh: int = 0
    sad: int = 0
    total: int = 0

    @classmethod
    def from_counts(cls, counts: Mapping[ReactionType, int] | None) -> "ReactionSummary":
        counts = counts or {}
        values = {rt.value: counts.get(rt, 0) for rt in ReactionType}
        return cls(**values, total=sum(values.values()))


UpsertReactionResponse.model_rebuild()
