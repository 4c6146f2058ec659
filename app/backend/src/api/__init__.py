"""Public API routers exposed by the FastAPI application."""

from . import assistant, health

__all__ = ["assistant", "health"]
