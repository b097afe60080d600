# src/civic_align/api/v1/endpoints/preferences.py
"""Voter preference endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from civic_align.core.errors import CivicAlignError
from civic_align.db.session import get_db
from civic_align.models import VoterPreferences
from civic_align.schemas.preferences import PreferencesResponse, PreferencesUpdate
from civic_align.services.preferences import get_preferences, save_preferences

from ..errors import http_error

router = APIRouter(prefix="/preferences", tags=["preferences"])
SessionDep = Annotated[Session, Depends(get_db)]


@router.put("/{voter_id}", response_model=PreferencesResponse)
async def put_preferences(
    voter_id: str,
    data: PreferencesUpdate,
    db: SessionDep,
) -> VoterPreferences:
    """Replace a voter's selected issues and dealbreakers."""
    try:
        return save_preferences(db, voter_id, data.selected_issues, data.dealbreakers)
    except CivicAlignError as exc:
        raise http_error(exc) from exc


@router.get("/{voter_id}", response_model=PreferencesResponse)
async def read_preferences(voter_id: str, db: SessionDep) -> VoterPreferences:
    """Return a voter's stored preferences."""
    try:
        return get_preferences(db, voter_id)
    except CivicAlignError as exc:
        raise http_error(exc) from exc
