"""HTTP API for the travel planner search layer."""

from .routes import router

__all__ = ["router"]
