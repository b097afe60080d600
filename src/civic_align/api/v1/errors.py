"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from civic_align.core.errors import (
    AlreadyEndorsed,
    CandidateNotEndorsable,
    CandidateNotFound,
    CivicAlignError,
    CounterUnderflow,
    IllegalStatusTransition,
    InvalidPreferenceCardinality,
    StoreUnavailable,
    VoterNotFound,
)

_STATUS_BY_ERROR: tuple[tuple[type[CivicAlignError], int], ...] = (
    (AlreadyEndorsed, status.HTTP_409_CONFLICT),
    (CandidateNotEndorsable, status.HTTP_409_CONFLICT),
    (IllegalStatusTransition, status.HTTP_409_CONFLICT),
    (InvalidPreferenceCardinality, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (CandidateNotFound, status.HTTP_404_NOT_FOUND),
    (VoterNotFound, status.HTTP_404_NOT_FOUND),
    (CounterUnderflow, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def http_error(exc: CivicAlignError) -> HTTPException:
    """Return the HTTPException matching a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
