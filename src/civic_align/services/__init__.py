# src/civic_align/services/__init__.py
"""Business logic services for the Civic Align service."""

from .endorsements import EndorsementLedger
from .events import EventHub, OutboxRelay
from .feed import FeedAssembler

__all__ = [
    "EndorsementLedger",
    "EventHub",
    "FeedAssembler",
    "OutboxRelay",
]
