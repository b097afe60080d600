"""Domain error types raised by the alignment and ranking services."""

from __future__ import annotations


class CivicAlignError(Exception):
    """Base class for all domain errors."""


class InvalidPreferenceCardinality(CivicAlignError):
    """Selected issues or dealbreakers fall outside the allowed range."""

    def __init__(self, field: str, count: int, minimum: int, maximum: int) -> None:
        self.field = field
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"{field} must contain between {minimum} and {maximum} entries, got {count}"
        )


class AlreadyEndorsed(CivicAlignError):
    """An active endorsement already exists for the voter/candidate pair."""

    def __init__(self, voter_id: str, candidate_id: str) -> None:
        self.voter_id = voter_id
        self.candidate_id = candidate_id
        super().__init__(f"Voter {voter_id} has already endorsed candidate {candidate_id}")


class CounterUnderflow(CivicAlignError):
    """A revoke would drive a candidate's endorsement counter below zero."""

    def __init__(self, candidate_id: str) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Endorsement counter for candidate {candidate_id} would go negative")


class StoreUnavailable(CivicAlignError):
    """Transient failure talking to the backing store."""


class CandidateNotFound(CivicAlignError):
    """The referenced candidate does not exist."""

    def __init__(self, candidate_id: str) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Candidate {candidate_id} not found")


class VoterNotFound(CivicAlignError):
    """No stored preferences exist for the referenced voter."""

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} not found")


class CandidateNotEndorsable(CivicAlignError):
    """Endorsements are only accepted for approved candidates."""

    def __init__(self, candidate_id: str, status: str) -> None:
        self.candidate_id = candidate_id
        self.status = status
        super().__init__(f"Candidate {candidate_id} cannot be endorsed while {status}")


class IllegalStatusTransition(CivicAlignError):
    """Requested candidate status change is not part of the state machine."""

    def __init__(self, candidate_id: str, current: str, target: str) -> None:
        self.candidate_id = candidate_id
        self.current = current
        self.target = target
        super().__init__(f"Candidate {candidate_id} cannot move from {current} to {target}")


class CandidatePoolUnavailable(CivicAlignError):
    """A batch job could not read the candidate pool at all."""
