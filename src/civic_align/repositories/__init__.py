"""Data access layer over the candidate store."""

from .candidate_repo import CandidateRepository
from .ranking_store import RankingSnapshot, RankingStore

__all__ = ["CandidateRepository", "RankingSnapshot", "RankingStore"]
