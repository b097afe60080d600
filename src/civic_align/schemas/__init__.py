# src/civic_align/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import ContestStageResponse, ContestStageUpdate, CutoffsUpdate, JobReportResponse
from .candidate import AlignmentResponse, CandidateResponse, LeaderboardEntryOut
from .endorsement import EndorsementCreate, EndorsementResponse, EndorsementStatus, RevokeResponse
from .feed import FeedFiltersIn, FeedItemOut, FeedRequest, FeedResponse
from .preferences import PreferencesResponse, PreferencesUpdate

__all__ = [
    "ContestStageResponse", "ContestStageUpdate", "CutoffsUpdate", "JobReportResponse",
    "AlignmentResponse", "CandidateResponse", "LeaderboardEntryOut",
    "EndorsementCreate", "EndorsementResponse", "EndorsementStatus", "RevokeResponse",
    "FeedFiltersIn", "FeedItemOut", "FeedRequest", "FeedResponse",
    "PreferencesResponse", "PreferencesUpdate",
]
