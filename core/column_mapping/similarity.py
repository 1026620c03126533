"""Fuzzy similarity scorers used by the matcher's last-resort tier.

A scorer compares two normalized headers and returns a similarity in [0, 1],
or None when the pair is too far apart to be considered at all. The matcher
only depends on this interface, so other measures can be swapped in.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from core.column_mapping.normalizer import NormalizedToken


class SimilarityScorer(ABC):
    """Interface for fuzzy header similarity."""

    name = "base"

    def __init__(self, max_distance_ratio: float = 0.4):
        """
        Args:
            max_distance_ratio: Edit distance, as a fraction of the longer
                string's length, above which a pair yields no score
        """
        self.max_distance_ratio = max_distance_ratio

    def within_distance(self, left: str, right: str) -> bool:
        longest = max(len(left), len(right))
        if longest == 0:
            return False
        return Levenshtein.distance(left, right) <= self.max_distance_ratio * longest

    @abstractmethod
    def score(self, header: NormalizedToken, alias: NormalizedToken) -> Optional[float]:
        """Similarity in [0, 1], or None when the pair is out of range."""


class EditDistanceScorer(SimilarityScorer):
    """Indel ratio over the compact forms, gated by Levenshtein distance."""

    name = "edit_distance"

    def score(self, header: NormalizedToken, alias: NormalizedToken) -> Optional[float]:
        left, right = header.compact, alias.compact
        if not self.within_distance(left, right):
            return None
        return fuzz.ratio(left, right) / 100.0


class TokenOverlapScorer(SimilarityScorer):
    """Token-set overlap, for headers whose words are reordered or padded."""

    name = "token_overlap"

    def score(self, header: NormalizedToken, alias: NormalizedToken) -> Optional[float]:
        if not set(header.tokens) & set(alias.tokens):
            # No shared word: fall back to the edit-distance gate on compact forms
            if not self.within_distance(header.compact, alias.compact):
                return None
            return fuzz.ratio(header.compact, alias.compact) / 100.0
        return fuzz.token_set_ratio(header.text, alias.text) / 100.0


SCORERS: Dict[str, Type[SimilarityScorer]] = {
    EditDistanceScorer.name: EditDistanceScorer,
    TokenOverlapScorer.name: TokenOverlapScorer,
}


def get_scorer(name: str, max_distance_ratio: float = 0.4) -> SimilarityScorer:
    """
    Build a scorer by name.

    Args:
        name: "edit_distance" or "token_overlap"
        max_distance_ratio: Distance cutoff passed to the scorer

    Returns:
        SimilarityScorer instance
    """
    try:
        scorer_cls = SCORERS[name]
    except KeyError:
        raise ValueError(f"Unknown fuzzy scorer '{name}'. Must be one of: {sorted(SCORERS)}") from None
    return scorer_cls(max_distance_ratio=max_distance_ratio)
