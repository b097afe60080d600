# src/civic_align/schemas/feed.py
"""Feed-related Pydantic schemas."""

from pydantic import BaseModel, Field

from civic_align.core.settings import settings


class FeedFiltersIn(BaseModel):
    """Optional filters narrowing a feed request."""

    issue_ids: list[str] | None = Field(
        None, description="Keep candidates speaking to at least one of these issues"
    )
    min_alignment: int | None = Field(None, ge=0, le=100, description="Minimum alignment score")
    exclude_dealbreakers: bool = Field(False, description="Drop candidates flagged as dealbreakers")


class FeedRequest(BaseModel):
    """Schema for requesting a personalised feed page."""

    voter_id: str = Field(..., min_length=1)
    limit: int = Field(settings.feed_default_limit, ge=1, le=settings.feed_max_limit)
    offset: int = Field(0, ge=0)
    filters: FeedFiltersIn = Field(default_factory=FeedFiltersIn)


class FeedItemOut(BaseModel):
    """One scored candidate in a feed page."""

    candidate_id: str
    alignment_score: int
    matched_issues: list[str]
    has_dealbreaker: bool


class FeedResponse(BaseModel):
    """Schema for a feed page returned by the API."""

    items: list[FeedItemOut]
    total: int
    has_more: bool
