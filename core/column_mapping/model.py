"""Data models for column mapping."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class MatchStrategy(str, Enum):
    """Strategy that produced a match, strongest first."""
    EXACT = "exact"
    NORMALIZED = "normalized"
    SYNONYM = "synonym"
    FUZZY = "fuzzy"

    @property
    def rank(self) -> int:
        """Lower rank wins ties."""
        return _STRATEGY_RANK[self]


_STRATEGY_RANK = {
    MatchStrategy.EXACT: 0,
    MatchStrategy.NORMALIZED: 1,
    MatchStrategy.SYNONYM: 2,
    MatchStrategy.FUZZY: 3,
}


class ValueShape(str, Enum):
    """Expected shape of a field's cell values, used only as a tie-break."""
    TEXT = "text"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    LIST = "list"
    PATH = "path"
    JSON = "json"
    MODEL = "model"


@dataclass(frozen=True)
class RawColumn:
    """One header as found in the input, with a few sample cell values."""

    header: str
    index: int
    samples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchCandidate:
    """Score of one column against one canonical field."""

    field_key: str
    confidence: float
    strategy: MatchStrategy
    matched_alias: str = ""

    def sort_key(self) -> Tuple[float, int]:
        """Descending confidence, then strategy rank."""
        return (-self.confidence, self.strategy.rank)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "field": self.field_key,
            "confidence": self.confidence,
            "strategy": self.strategy.value,
            "matched_alias": self.matched_alias,
        }


@dataclass
class DetectedColumn:
    """Per-column diagnostics in an analysis result."""

    column: str
    index: int
    field: Optional[str]
    confidence: float
    strategy: Optional[MatchStrategy]
    mapped: bool
    samples: List[str] = field(default_factory=list)
    candidates: List[MatchCandidate] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "column": self.column,
            "index": self.index,
            "field": self.field,
            "confidence": self.confidence,
            "strategy": self.strategy.value if self.strategy else None,
            "mapped": self.mapped,
            "samples": list(self.samples),
            "candidates": [c.to_dict() for c in self.candidates],
        }


@dataclass
class AnalysisResult:
    """Result of analyzing a whole file's headers"""

    recommended_mapping: Dict[str, str]  # header -> canonical field key
    detected_columns: List[DetectedColumn]
    confidence: float
    unmapped_columns: List[str]
    missing_required_fields: List[str]
    registry_version: str
    delimiter: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "recommended_mapping": dict(self.recommended_mapping),
            "detected_columns": [c.to_dict() for c in self.detected_columns],
            "confidence": self.confidence,
            "unmapped_columns": list(self.unmapped_columns),
            "missing_required_fields": list(self.missing_required_fields),
            "registry_version": self.registry_version,
            "delimiter": self.delimiter,
        }
