# src/civic_align/api/v1/endpoints/feed.py
"""Personalised feed endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from civic_align.core.errors import CivicAlignError
from civic_align.db.session import get_db
from civic_align.schemas.feed import FeedItemOut, FeedRequest, FeedResponse
from civic_align.services.feed import FeedAssembler, FeedFilters

from ..errors import http_error

router = APIRouter(prefix="/feed", tags=["feed"])
SessionDep = Annotated[Session, Depends(get_db)]

feed_assembler = FeedAssembler()


@router.post("", response_model=FeedResponse)
async def get_feed(request: FeedRequest, db: SessionDep) -> FeedResponse:
    """Return a page of approved candidates ordered by alignment for the voter."""
    filters = FeedFilters(
        min_alignment=request.filters.min_alignment,
        issue_ids=frozenset(request.filters.issue_ids or ()),
        exclude_dealbreakers=request.filters.exclude_dealbreakers,
    )
    try:
        page = feed_assembler.build_for_voter(
            db,
            request.voter_id,
            filters=filters,
            limit=request.limit,
            offset=request.offset,
        )
    except CivicAlignError as exc:
        raise http_error(exc) from exc

    return FeedResponse(
        items=[
            FeedItemOut(
                candidate_id=item.candidate_id,
                alignment_score=item.alignment_score,
                matched_issues=sorted(item.matched_issues),
                has_dealbreaker=item.has_dealbreaker,
            )
            for item in page.items
        ],
        total=page.total,
        has_more=page.has_more,
    )
