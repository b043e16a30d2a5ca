"""Candidate matcher and assignment strategies."""

from .matcher import CandidateMatcher
from .predicates import MatchPredicate, is_match_candidate
from .strategies import (
    AssignmentStrategy,
    GreedyFirstFitStrategy,
    OptimalAssignmentStrategy,
    build_strategy,
)

__all__ = [
    "CandidateMatcher",
    "MatchPredicate",
    "is_match_candidate",
    "AssignmentStrategy",
    "GreedyFirstFitStrategy",
    "OptimalAssignmentStrategy",
    "build_strategy",
]
