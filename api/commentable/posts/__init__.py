from .models import Post


__all__ = ["Post"]
