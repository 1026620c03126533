"""Mapping aggregator: combines per-column candidates into a file-level result."""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from core.column_mapping.assignment import AssignmentStrategy, GreedyAssignment, ScoredPair, get_strategy
from core.column_mapping.canonical_fields import FieldRegistry
from core.column_mapping.model import AnalysisResult, DetectedColumn, MatchCandidate, RawColumn
from core.utils.sanitize import sanitize_for_logging

logger = logging.getLogger(__name__)

MAX_SAMPLES_REPORTED = 3


class MappingAggregator:
    """Resolves candidates into a collision-free mapping with an overall confidence."""

    def __init__(self, min_confidence: float = 0.5, strategy: Optional[AssignmentStrategy] = None):
        """
        Initialize the aggregator.

        Args:
            min_confidence: Floor below which a column is reported unmapped
            strategy: Assignment strategy (greedy by default)
        """
        self.min_confidence = min_confidence
        self.strategy = strategy or GreedyAssignment()

    @classmethod
    def from_config(cls, mapping_config) -> "MappingAggregator":
        """Build an aggregator from a MappingConfig."""
        return cls(
            min_confidence=mapping_config.min_confidence,
            strategy=get_strategy(mapping_config.assignment_strategy),
        )

    def aggregate(
        self,
        columns: Sequence[RawColumn],
        candidates_by_column: Mapping[RawColumn, List[MatchCandidate]],
        registry: FieldRegistry,
        delimiter: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Build the analysis result for a whole file.

        Args:
            columns: Raw columns in file order
            candidates_by_column: Sorted candidates for each column
            registry: Canonical field registry the candidates were scored against
            delimiter: Detected delimiter, when the input was CSV text

        Returns:
            AnalysisResult
        """
        pairs = [
            ScoredPair(column.index, candidate)
            for column in columns
            for candidate in candidates_by_column.get(column, [])
            if candidate.confidence >= self.min_confidence and candidate.field_key in registry
        ]
        assigned = self.strategy.assign(pairs)

        recommended_mapping: Dict[str, str] = {}
        detected_columns: List[DetectedColumn] = []
        unmapped_columns: List[str] = []

        for column in columns:
            candidates = list(candidates_by_column.get(column, []))
            samples = [s for s in column.samples if s and s.strip()][:MAX_SAMPLES_REPORTED]
            chosen = assigned.get(column.index)

            if chosen is not None:
                recommended_mapping[column.header] = chosen.field_key
                detected_columns.append(DetectedColumn(
                    column=column.header,
                    index=column.index,
                    field=chosen.field_key,
                    confidence=chosen.confidence,
                    strategy=chosen.strategy,
                    mapped=True,
                    samples=samples,
                    candidates=candidates,
                ))
                continue

            # Unmapped: report the best candidate it had, if any
            best = candidates[0] if candidates else None
            unmapped_columns.append(column.header)
            detected_columns.append(DetectedColumn(
                column=column.header,
                index=column.index,
                field=best.field_key if best else None,
                confidence=best.confidence if best else 0.0,
                strategy=best.strategy if best else None,
                mapped=False,
                samples=samples,
                candidates=candidates,
            ))
            logger.debug(
                f"Column {column.index} {sanitize_for_logging(column.header, 60)!r} left unmapped "
                f"(best: {best.field_key if best else None})"
            )

        assigned_fields = set(recommended_mapping.values())
        missing_required = [key for key in registry.required_keys if key not in assigned_fields]
        confidence = self.overall_confidence(
            [c.confidence for c in assigned.values()],
            len(registry.required_keys) - len(missing_required),
            len(registry.required_keys),
        )

        logger.info(
            f"Mapped {len(recommended_mapping)}/{len(columns)} columns "
            f"(confidence {confidence:.3f}, missing required: {missing_required or 'none'})"
        )
        return AnalysisResult(
            recommended_mapping=recommended_mapping,
            detected_columns=detected_columns,
            confidence=confidence,
            unmapped_columns=unmapped_columns,
            missing_required_fields=missing_required,
            registry_version=registry.version,
            delimiter=delimiter,
        )

    @staticmethod
    def overall_confidence(confidences: Sequence[float], assigned_required: int, total_required: int) -> float:
        """Mean assigned confidence times the share of required fields assigned."""
        if not confidences:
            return 0.0
        completeness = assigned_required / total_required if total_required else 1.0
        return round(sum(confidences) / len(confidences) * completeness, 4)
