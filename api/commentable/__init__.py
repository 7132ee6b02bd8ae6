"""Commentable: comments, reactions and moderation for videos and posts."""
