# src/civic_align/models/__init__.py
"""SQLAlchemy models for the Civic Align service."""

from .candidate import Candidate, CandidatePosition
from .endorsement import Endorsement
from .event import DomainEvent
from .issue import Issue
from .metrics import ProfileMetricsDay
from .party import EndorsementCutoff, PartyConfig
from .psa import PSA
from .voter import VoterPreferences

__all__ = [
    "Candidate", "CandidatePosition",
    "DomainEvent",
    "Endorsement",
    "EndorsementCutoff", "PartyConfig",
    "Issue",
    "ProfileMetricsDay",
    "PSA",
    "VoterPreferences",
]
