"""Personalised candidate feed assembly.

The feed is a pure read path: it scores every approved candidate for the
requesting voter, filters, sorts the complete filtered set and only then
slices the requested page so pagination stays stable between requests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from civic_align.core.errors import VoterNotFound
from civic_align.core.settings import settings
from civic_align.models import Candidate, VoterPreferences
from civic_align.models.candidate import CANDIDATE_STATUS_APPROVED
from civic_align.repositories.candidate_repo import CandidateRepository
from civic_align.services import alignment
from civic_align.services.alignment import PositionLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoterProfile:
    """The parts of a voter's preferences the feed reads."""

    voter_id: str
    selected_issues: frozenset[str]
    dealbreakers: frozenset[str]

    @classmethod
    def from_model(cls, prefs: VoterPreferences) -> VoterProfile:
        return cls(
            voter_id=prefs.voter_id,
            selected_issues=frozenset(prefs.selected_issues or ()),
            dealbreakers=frozenset(prefs.dealbreakers or ()),
        )


@dataclass(frozen=True)
class CandidateProfile:
    """A candidate as seen by the feed.

    ``positions`` is ``None`` when position data could not be loaded; the
    scorer treats that the same as a candidate with no stated positions.
    """

    candidate_id: str
    status: str
    positions: Sequence[PositionLike] | None
    psa_issue_ids: frozenset[str] = frozenset()

    @property
    def issue_ids(self) -> frozenset[str]:
        """Issues the candidate speaks to through positions or published PSAs."""
        stated = frozenset(p.issue_id for p in self.positions or ())
        return stated | self.psa_issue_ids

    @classmethod
    def from_model(
        cls,
        candidate: Candidate,
        psa_issue_ids: Iterable[str] = (),
    ) -> CandidateProfile:
        return cls(
            candidate_id=candidate.id,
            status=candidate.status,
            positions=list(candidate.positions),
            psa_issue_ids=frozenset(psa_issue_ids),
        )


@dataclass(frozen=True)
class FeedFilters:
    """Optional narrowing applied after scoring."""

    min_alignment: int | None = None
    issue_ids: frozenset[str] = field(default_factory=frozenset)
    exclude_dealbreakers: bool = False


@dataclass(frozen=True)
class FeedItem:
    """Derived per-voter view of one candidate; never cached across voters."""

    candidate_id: str
    alignment_score: int
    matched_issues: frozenset[str]
    has_dealbreaker: bool


@dataclass(frozen=True)
class FeedPage:
    """One page of an assembled feed."""

    items: list[FeedItem]
    total: int
    has_more: bool


def _passes(item: FeedItem, profile: CandidateProfile, filters: FeedFilters) -> bool:
    if filters.min_alignment is not None and item.alignment_score < filters.min_alignment:
        return False
    if filters.issue_ids and not (profile.issue_ids & filters.issue_ids):
        return False
    if filters.exclude_dealbreakers and item.has_dealbreaker:
        return False
    return True


def sort_key(item: FeedItem) -> tuple[bool, int, str]:
    """Non-dealbreakers first, then alignment descending, then candidate id."""
    return (item.has_dealbreaker, -item.alignment_score, item.candidate_id)


class FeedAssembler:
    """Builds ordered, paginated feeds from candidate and voter records."""

    def __init__(self, dealbreaker_threshold: int | None = None) -> None:
        self.dealbreaker_threshold = (
            settings.dealbreaker_spectrum_threshold
            if dealbreaker_threshold is None
            else dealbreaker_threshold
        )

    def score_candidate(self, voter: VoterProfile, candidate: CandidateProfile) -> FeedItem:
        """Score a single candidate for ``voter`` with the shared formula."""
        result = alignment.score(
            voter.selected_issues,
            voter.dealbreakers,
            candidate.positions,
            dealbreaker_threshold=self.dealbreaker_threshold,
        )
        return FeedItem(
            candidate_id=candidate.candidate_id,
            alignment_score=result.score,
            matched_issues=result.matched_issues,
            has_dealbreaker=result.has_dealbreaker,
        )

    def assemble(
        self,
        voter: VoterProfile,
        candidate_pool: Iterable[CandidateProfile],
        filters: FeedFilters | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> FeedPage:
        """Score, filter, sort and paginate ``candidate_pool`` for ``voter``.

        Args:
            voter: Preferences of the requesting voter.
            candidate_pool: Candidates to consider; anything not approved is skipped.
            filters: Optional filters applied before sorting.
            limit: Maximum number of items in the page.
            offset: Number of sorted items to skip.

        Raises:
            ValueError: If ``limit`` is below 1 or ``offset`` is negative.
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if offset < 0:
            raise ValueError("offset must not be negative")
        filters = filters or FeedFilters()

        kept: list[FeedItem] = []
        for candidate in candidate_pool:
            if candidate.status != CANDIDATE_STATUS_APPROVED:
                continue
            item = self.score_candidate(voter, candidate)
            if _passes(item, candidate, filters):
                kept.append(item)

        kept.sort(key=sort_key)
        total = len(kept)
        return FeedPage(
            items=kept[offset:offset + limit],
            total=total,
            has_more=offset + limit < total,
        )

    def build_for_voter(
        self,
        db: Session,
        voter_id: str,
        filters: FeedFilters | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> FeedPage:
        """Load the voter and the approved pool from the store and assemble a feed.

        Raises:
            VoterNotFound: If the voter has no stored preferences.
        """
        prefs = db.get(VoterPreferences, voter_id)
        if prefs is None:
            raise VoterNotFound(voter_id)

        repo = CandidateRepository(db)
        candidates = repo.list_approved()
        psa_issues = repo.published_psa_issues([c.id for c in candidates])
        pool = [
            CandidateProfile.from_model(c, psa_issues.get(c.id, ()))
            for c in candidates
        ]
        page = self.assemble(
            VoterProfile.from_model(prefs),
            pool,
            filters,
            limit or settings.feed_default_limit,
            offset,
        )
        logger.debug(
            "Assembled feed for voter %s: %d of %d items", voter_id, len(page.items), page.total
        )
        return page
