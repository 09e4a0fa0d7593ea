"""Candidate selection and ranking of partner garments."""

from .candidates import CandidateCriteria, CandidateFilter, Pagination, SortSpec, parse_sort
from .profile import Profile, ProfileResolver
from .ranker import MatchRanker, RankedSuggestion

__all__ = [
    "CandidateCriteria",
    "CandidateFilter",
    "MatchRanker",
    "Pagination",
    "Profile",
    "ProfileResolver",
    "RankedSuggestion",
    "SortSpec",
    "parse_sort",
]
