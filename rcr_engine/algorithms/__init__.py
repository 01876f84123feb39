"""Convenience imports for the RCR pipeline stages."""

from .hypothesis_finder import HypothesisFinder
from .collapsing import CollapsingStrategy
from .mapping import MappingService, MappingReport
from .scorer import Scorer, ScoringError, StateChangeReport

__all__ = [
    "HypothesisFinder",
    "CollapsingStrategy",
    "MappingService",
    "MappingReport",
    "Scorer",
    "ScoringError",
    "StateChangeReport",
]
