"""User accounts and roles."""

from .models import User


__all__ = ["User"]
