"""API routers."""

from api.routers import extraction

__all__ = ["extraction"]
