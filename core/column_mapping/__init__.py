"""Automatic CSV column mapping for bulk agent creation."""

from core.column_mapping.aggregator import MappingAggregator
from core.column_mapping.assignment import GreedyAssignment, OptimalAssignment, get_strategy
from core.column_mapping.canonical_fields import CanonicalField, FieldRegistry, get_registry, load_registry
from core.column_mapping.exceptions import (
    ColumnMappingError,
    EmptyInputError,
    InvalidInputError,
    InvalidOverrideError,
    InvalidRegistryError,
)
from core.column_mapping.matcher import ColumnMatcher
from core.column_mapping.model import (
    AnalysisResult,
    DetectedColumn,
    MatchCandidate,
    MatchStrategy,
    RawColumn,
    ValueShape,
)
from core.column_mapping.normalizer import NormalizedToken, normalize
from core.column_mapping.service import ColumnMappingService

__all__ = [
    "AnalysisResult",
    "CanonicalField",
    "ColumnMappingError",
    "ColumnMappingService",
    "ColumnMatcher",
    "DetectedColumn",
    "EmptyInputError",
    "FieldRegistry",
    "GreedyAssignment",
    "InvalidInputError",
    "InvalidOverrideError",
    "InvalidRegistryError",
    "MappingAggregator",
    "MatchCandidate",
    "MatchStrategy",
    "NormalizedToken",
    "OptimalAssignment",
    "RawColumn",
    "ValueShape",
    "get_registry",
    "get_strategy",
    "load_registry",
    "normalize",
]
