"""Pydantic response models for the column mapping API."""

from typing import Dict, List, Optional

from pydantic import BaseModel


class MatchCandidateInfo(BaseModel):
    """One scored field candidate for a column."""

    field: str
    confidence: float
    strategy: str
    matched_alias: str


class DetectedColumnInfo(BaseModel):
    """Per-column diagnostics."""

    column: str
    index: int
    field: Optional[str]
    confidence: float
    strategy: Optional[str]
    mapped: bool
    samples: List[str]
    candidates: List[MatchCandidateInfo]


class AnalysisResponse(BaseModel):
    """Response model for a column mapping analysis."""

    recommended_mapping: Dict[str, str]
    detected_columns: List[DetectedColumnInfo]
    confidence: float
    unmapped_columns: List[str]
    missing_required_fields: List[str]
    registry_version: str
    delimiter: Optional[str] = None


class UploadAnalysisResponse(BaseModel):
    """Response model for an uploaded CSV file."""

    filename: Optional[str]
    size: int
    analysis: AnalysisResponse


class CanonicalFieldInfo(BaseModel):
    """Canonical field definition."""

    key: str
    required: bool
    shape: str
    aliases: List[str]
    synonyms: List[str]


class FieldRegistryResponse(BaseModel):
    """Response model for the canonical field registry."""

    version: str
    fields: List[CanonicalFieldInfo]


class ResolveMappingResponse(BaseModel):
    """Response model for a resolved mapping."""

    mapping: Dict[str, str]
    missing_required_fields: List[str]
