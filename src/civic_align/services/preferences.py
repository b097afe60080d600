"""Write-time validation and storage of voter issue preferences."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from civic_align.core.errors import InvalidPreferenceCardinality, VoterNotFound
from civic_align.core.settings import settings
from civic_align.models import VoterPreferences

__all__ = ["get_preferences", "save_preferences", "validate_preferences"]


def _distinct(values: Iterable[str]) -> list[str]:
    """Drop duplicates while keeping the voter's original order."""
    return list(dict.fromkeys(values))


def validate_preferences(
    selected_issues: Iterable[str],
    dealbreakers: Iterable[str],
) -> tuple[list[str], list[str]]:
    """Return de-duplicated preferences or raise if counts are out of range.

    Raises:
        InvalidPreferenceCardinality: If either list has too few or too many entries.
    """
    issues = _distinct(selected_issues)
    breakers = _distinct(dealbreakers)

    if not settings.min_selected_issues <= len(issues) <= settings.max_selected_issues:
        raise InvalidPreferenceCardinality(
            "selected_issues",
            len(issues),
            settings.min_selected_issues,
            settings.max_selected_issues,
        )
    if len(breakers) > settings.max_dealbreakers:
        raise InvalidPreferenceCardinality(
            "dealbreakers", len(breakers), 0, settings.max_dealbreakers
        )
    return issues, breakers


def save_preferences(
    db: Session,
    voter_id: str,
    selected_issues: Iterable[str],
    dealbreakers: Iterable[str],
) -> VoterPreferences:
    """Validate and upsert a voter's preferences."""
    issues, breakers = validate_preferences(selected_issues, dealbreakers)

    prefs = db.get(VoterPreferences, voter_id)
    if prefs is None:
        prefs = VoterPreferences(voter_id=voter_id)
        db.add(prefs)
    prefs.selected_issues = issues
    prefs.dealbreakers = breakers
    db.commit()
    db.refresh(prefs)
    return prefs


def get_preferences(db: Session, voter_id: str) -> VoterPreferences:
    """Return stored preferences for ``voter_id``.

    Raises:
        VoterNotFound: If the voter has not saved preferences.
    """
    prefs = db.get(VoterPreferences, voter_id)
    if prefs is None:
        raise VoterNotFound(voter_id)
    return prefs
