"""Voter/candidate alignment scoring.

This is the single implementation of the alignment formula. The feed, the
candidate alignment endpoint and the leaderboard all call :func:`score` so
the numbers a voter sees are always consistent.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

NEUTRAL_SCORE = 50
NO_POSITIONS_SCORE = 30
BASE_SCORE = 20
OVERLAP_WEIGHT = 50
PRIORITY_BONUS_CAP = 30
DEALBREAKER_SPECTRUM_THRESHOLD = 80


class PositionLike(Protocol):
    """Anything carrying the three fields scoring reads from a position."""

    issue_id: str
    priority: int
    spectrum_position: int


@dataclass(frozen=True)
class IssueStance:
    """Lightweight position record for callers without ORM rows."""

    issue_id: str
    priority: int
    spectrum_position: int = 0


@dataclass(frozen=True)
class AlignmentResult:
    """Outcome of scoring one candidate for one voter."""

    score: int
    matched_issues: frozenset[str]
    has_dealbreaker: bool


def priority_bonus(priority: int) -> int:
    """Return the bonus a matched issue earns for the candidate's priority."""
    if priority <= 3:
        return 10
    if priority <= 5:
        return 5
    return 0


def has_dealbreaker(
    voter_dealbreakers: Iterable[str],
    candidate_positions: Sequence[PositionLike],
    threshold: int = DEALBREAKER_SPECTRUM_THRESHOLD,
) -> bool:
    """Return True if the candidate holds an extreme stance on a dealbreaker issue."""
    dealbreakers = set(voter_dealbreakers)
    return any(
        p.issue_id in dealbreakers and abs(p.spectrum_position) > threshold
        for p in candidate_positions
    )


def score(
    voter_issues: Iterable[str],
    voter_dealbreakers: Iterable[str],
    candidate_positions: Sequence[PositionLike] | None,
    *,
    dealbreaker_threshold: int = DEALBREAKER_SPECTRUM_THRESHOLD,
) -> AlignmentResult:
    """Score how well a candidate's stated positions match a voter's issues.

    Args:
        voter_issues: Issue ids the voter selected as priorities.
        voter_dealbreakers: Issue ids the voter marked as dealbreakers.
        candidate_positions: The candidate's positions. ``None`` is treated as
            no stated positions.
        dealbreaker_threshold: Absolute spectrum value a dealbreaker stance
            must exceed to be flagged.

    Returns:
        The 0-100 score, the issues both sides prioritise, and the dealbreaker flag.
    """
    issues = set(voter_issues)
    positions = list(candidate_positions or ())
    flagged = has_dealbreaker(voter_dealbreakers, positions, dealbreaker_threshold)

    if not issues:
        return AlignmentResult(NEUTRAL_SCORE, frozenset(), flagged)

    # No stated positions: flat low-confidence score instead of neutral.
    if not positions:
        return AlignmentResult(NO_POSITIONS_SCORE, frozenset(), flagged)

    priority_by_issue: dict[str, int] = {}
    for position in positions:
        priority_by_issue.setdefault(position.issue_id, position.priority)

    matched = frozenset(issue for issue in priority_by_issue if issue in issues)
    overlap_ratio = len(matched) / len(issues)
    bonus = sum(priority_bonus(priority_by_issue[issue]) for issue in matched)
    capped_bonus = min(bonus, PRIORITY_BONUS_CAP)

    # Halves round up: 32.5 scores 33.
    raw = math.floor(BASE_SCORE + overlap_ratio * OVERLAP_WEIGHT + capped_bonus + 0.5)
    return AlignmentResult(max(0, min(100, raw)), matched, flagged)
