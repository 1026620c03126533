"""Column matcher: scores one raw column against every canonical field."""

import json
import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from core.column_mapping.canonical_fields import CanonicalField
from core.column_mapping.model import MatchCandidate, MatchStrategy, RawColumn, ValueShape
from core.column_mapping.normalizer import NormalizedToken, normalize
from core.column_mapping.similarity import EditDistanceScorer, SimilarityScorer, get_scorer

logger = logging.getLogger(__name__)

# Tier confidence bands
EXACT_CONFIDENCE = 1.0
NORMALIZED_BASE, NORMALIZED_SPAN = 0.75, 0.20  # [0.75, 0.95)
SYNONYM_EXACT_CONFIDENCE = 0.85
SYNONYM_BASE, SYNONYM_SPAN = 0.60, 0.20  # [0.60, 0.80)
# A sample bonus never lifts a non-exact match to exact confidence
NON_EXACT_CEILING = 0.99

# Compact substrings shorter than this are too weak ("cc" in "accuracy")
MIN_COMPACT_OVERLAP = 4

_NUMERIC = re.compile(r"^[+-]?\d+(?:[.,]\d+)?\s*(?:[kmgt]i?b?|cores?)?$", re.IGNORECASE)
_BOOLEAN_VALUES = {"true", "false", "1", "0", "yes", "no", "y", "n", "on", "off"}
_MODEL_MARKERS = ("gpt", "claude", "sonnet", "haiku", "opus", "turbo", "llama", "gemini", "mistral")
_WINDOWS_DRIVE = re.compile(r"^[a-zA-Z]:[\\/]")


def _is_numeric(value: str) -> bool:
    return bool(_NUMERIC.match(value))


def _is_boolean(value: str) -> bool:
    return value.lower() in _BOOLEAN_VALUES


def _is_list(value: str) -> bool:
    return any(sep in value for sep in (",", ";", "|"))


def _is_path(value: str) -> bool:
    return value.startswith(("/", "~", "./", "../")) or "/" in value or "\\" in value or bool(_WINDOWS_DRIVE.match(value))


def _is_json(value: str) -> bool:
    if not value.startswith("{"):
        return False
    try:
        return isinstance(json.loads(value), dict)
    except ValueError:
        return False


def _is_model(value: str) -> bool:
    lowered = value.lower()
    return any(marker in lowered for marker in _MODEL_MARKERS)


def _is_text(value: str) -> bool:
    """Free text: none of the more specific shapes."""
    return not any(
        check(value)
        for check in (_is_numeric, _is_boolean, _is_path, _is_json, _is_model, _is_list)
    )


SHAPE_CHECKS: Dict[ValueShape, Callable[[str], bool]] = {
    ValueShape.TEXT: _is_text,
    ValueShape.NUMERIC: _is_numeric,
    ValueShape.BOOLEAN: _is_boolean,
    ValueShape.LIST: _is_list,
    ValueShape.PATH: _is_path,
    ValueShape.JSON: _is_json,
    ValueShape.MODEL: _is_model,
}


def shape_fit(shape: ValueShape, samples: Sequence[str]) -> float:
    """Fraction of non-empty samples that look like the given shape."""
    values = [s.strip() for s in samples if s and s.strip()]
    if not values:
        return 0.0
    check = SHAPE_CHECKS[shape]
    return sum(1 for v in values if check(v)) / len(values)


def _overlap_ratio(left: NormalizedToken, right: NormalizedToken) -> float:
    """Length of the shorter compact form over the longer one."""
    shorter, longer = sorted((len(left.compact), len(right.compact)))
    return shorter / longer if longer else 0.0


def _overlaps(header: NormalizedToken, alias: NormalizedToken) -> bool:
    if header.contains(alias) or alias.contains(header):
        return True
    shorter, longer = sorted((header.compact, alias.compact), key=len)
    return len(shorter) >= MIN_COMPACT_OVERLAP and shorter in longer


class ColumnMatcher:
    """Multi-strategy scorer: exact, normalized substring, synonym, fuzzy."""

    def __init__(
        self,
        scorer: Optional[SimilarityScorer] = None,
        tie_epsilon: float = 0.05,
        sample_bonus_max: float = 0.1,
        fuzzy_confidence_cap: float = 0.6,
    ):
        """
        Initialize the matcher.

        Args:
            scorer: Fuzzy similarity scorer (edit distance by default)
            tie_epsilon: Confidence gap under which sampled values break ties
            sample_bonus_max: Largest bonus a value-shape fit can add
            fuzzy_confidence_cap: Highest confidence the fuzzy tier can give
        """
        self.scorer = scorer or EditDistanceScorer()
        self.tie_epsilon = tie_epsilon
        self.sample_bonus_max = min(sample_bonus_max, 0.1)
        self.fuzzy_confidence_cap = fuzzy_confidence_cap

    @classmethod
    def from_config(cls, mapping_config) -> "ColumnMatcher":
        """Build a matcher from a MappingConfig."""
        return cls(
            scorer=get_scorer(mapping_config.fuzzy_scorer, mapping_config.fuzzy_max_distance_ratio),
            tie_epsilon=mapping_config.tie_epsilon,
            sample_bonus_max=mapping_config.sample_bonus_max,
            fuzzy_confidence_cap=mapping_config.fuzzy_confidence_cap,
        )

    def match(self, column: RawColumn, fields: Iterable[CanonicalField]) -> List[MatchCandidate]:
        """
        Score a column against every canonical field.

        Args:
            column: Raw column (header, index, optional samples)
            fields: Canonical fields to score against

        Returns:
            Candidates sorted by descending confidence, strategy rank, then field order
        """
        fields = list(fields)
        header = normalize(column.header)
        if header.is_placeholder:
            logger.debug(f"Column {column.index} header {column.header!r} is blank or generic, skipping")
            return []

        order = {f.key: position for position, f in enumerate(fields)}
        candidates = []
        for canonical in fields:
            candidate = self.score_field(header, canonical)
            if candidate is not None:
                candidates.append(candidate)

        candidates.sort(key=lambda c: c.sort_key() + (order[c.field_key],))
        if column.samples and len(candidates) > 1:
            shapes = {f.key: f.shape for f in fields}
            candidates = self._break_ties(candidates, column.samples, shapes)
            candidates.sort(key=lambda c: c.sort_key() + (order[c.field_key],))
        return candidates

    def score_field(self, header: NormalizedToken, canonical: CanonicalField) -> Optional[MatchCandidate]:
        """
        Score a normalized header against one field; first successful tier wins.

        Returns:
            MatchCandidate, or None when no tier produced a score
        """
        for alias in canonical.normalized_aliases:
            if alias.compact == header.compact:
                return MatchCandidate(canonical.key, EXACT_CONFIDENCE, MatchStrategy.EXACT, alias.text)

        best = self._best_overlap(
            header, canonical, canonical.normalized_aliases,
            MatchStrategy.NORMALIZED, NORMALIZED_BASE, NORMALIZED_SPAN,
        )
        if best is not None:
            return best

        for synonym in canonical.normalized_synonyms:
            if synonym.compact == header.compact:
                return MatchCandidate(canonical.key, SYNONYM_EXACT_CONFIDENCE, MatchStrategy.SYNONYM, synonym.text)
        best = self._best_overlap(
            header, canonical, canonical.normalized_synonyms,
            MatchStrategy.SYNONYM, SYNONYM_BASE, SYNONYM_SPAN,
        )
        if best is not None:
            return best

        return self._best_fuzzy(header, canonical)

    def _best_overlap(self, header, canonical, names, strategy, base, span) -> Optional[MatchCandidate]:
        best = None
        for name in names:
            if not _overlaps(header, name):
                continue
            confidence = round(base + span * _overlap_ratio(header, name), 4)
            if best is None or confidence > best.confidence:
                best = MatchCandidate(canonical.key, confidence, strategy, name.text)
        return best

    def _best_fuzzy(self, header: NormalizedToken, canonical: CanonicalField) -> Optional[MatchCandidate]:
        best = None
        for name in canonical.normalized_aliases + canonical.normalized_synonyms:
            similarity = self.scorer.score(header, name)
            if similarity is None:
                continue
            confidence = round(min(self.fuzzy_confidence_cap, self.fuzzy_confidence_cap * similarity), 4)
            if confidence > 0 and (best is None or confidence > best.confidence):
                best = MatchCandidate(canonical.key, confidence, MatchStrategy.FUZZY, name.text)
        return best

    def _break_ties(
        self,
        candidates: List[MatchCandidate],
        samples: Sequence[str],
        shapes: Dict[str, ValueShape],
    ) -> List[MatchCandidate]:
        top = candidates[0].confidence
        tied = [c for c in candidates if top - c.confidence <= self.tie_epsilon]
        if len(tied) < 2:
            return candidates

        adjusted = []
        for candidate in candidates:
            if candidate not in tied or candidate.strategy is MatchStrategy.EXACT:
                adjusted.append(candidate)
                continue
            bonus = self.sample_bonus_max * shape_fit(shapes[candidate.field_key], samples)
            ceiling = self.fuzzy_confidence_cap if candidate.strategy is MatchStrategy.FUZZY else NON_EXACT_CEILING
            confidence = round(min(candidate.confidence + bonus, ceiling), 4)
            if bonus:
                logger.debug(
                    f"Sample tie-break: {candidate.field_key} {candidate.confidence} -> {confidence}"
                )
            adjusted.append(
                MatchCandidate(candidate.field_key, confidence, candidate.strategy, candidate.matched_alias)
            )
        return adjusted
