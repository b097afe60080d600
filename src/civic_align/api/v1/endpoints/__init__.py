# src/civic_align/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .candidates import router as candidates_router
from .endorsements import router as endorsements_router
from .feed import router as feed_router
from .preferences import router as preferences_router

__all__ = [
    "admin_router",
    "candidates_router",
    "endorsements_router",
    "feed_router",
    "preferences_router",
]
