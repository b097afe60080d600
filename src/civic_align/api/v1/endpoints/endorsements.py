# src/civic_align/api/v1/endpoints/endorsements.py
"""Endorsement ledger endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from civic_align.core.errors import CivicAlignError
from civic_align.db.session import get_db
from civic_align.models import Endorsement
from civic_align.schemas.endorsement import (
    EndorsementCreate,
    EndorsementResponse,
    EndorsementStatus,
    RevokeResponse,
)
from civic_align.services.endorsements import EndorsementLedger

from ..errors import http_error

router = APIRouter(prefix="/endorsements", tags=["endorsements"])
SessionDep = Annotated[Session, Depends(get_db)]


def get_ledger(db: SessionDep) -> EndorsementLedger:
    """Return a ledger bound to the request's session."""
    return EndorsementLedger(db)


LedgerDep = Annotated[EndorsementLedger, Depends(get_ledger)]


@router.post("", response_model=EndorsementResponse, status_code=status.HTTP_201_CREATED)
async def endorse(data: EndorsementCreate, ledger: LedgerDep) -> Endorsement:
    """Endorse a candidate on behalf of a voter."""
    try:
        return ledger.endorse(data.voter_id, data.candidate_id)
    except CivicAlignError as exc:
        raise http_error(exc) from exc


@router.delete("/{voter_id}/{candidate_id}", response_model=RevokeResponse)
async def revoke(voter_id: str, candidate_id: str, ledger: LedgerDep) -> RevokeResponse:
    """Revoke a voter's endorsement; succeeds even if none was active."""
    try:
        revoked = ledger.revoke(voter_id, candidate_id)
    except CivicAlignError as exc:
        raise http_error(exc) from exc
    return RevokeResponse(revoked=revoked)


@router.get("/{voter_id}/{candidate_id}", response_model=EndorsementStatus)
async def endorsement_status(
    voter_id: str,
    candidate_id: str,
    ledger: LedgerDep,
) -> EndorsementStatus:
    """Report whether the voter currently endorses the candidate."""
    return EndorsementStatus(active=ledger.has_active(voter_id, candidate_id))


@router.get("/{voter_id}", response_model=list[EndorsementResponse])
async def list_voter_endorsements(voter_id: str, ledger: LedgerDep) -> list[Endorsement]:
    """List the voter's active endorsements."""
    return ledger.active_for_voter(voter_id)
