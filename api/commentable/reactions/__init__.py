"""Comment reactions: one per user per comment, toggled by repeating it."""

from .models import Reaction, ReactionType


__all__ = ["Reaction", "ReactionType"]
