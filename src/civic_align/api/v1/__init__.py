# src/civic_align/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    candidates_router,
    endorsements_router,
    feed_router,
    preferences_router,
)

__all__ = [
    "admin_router",
    "candidates_router",
    "endorsements_router",
    "feed_router",
    "preferences_router",
]
