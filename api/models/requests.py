"""Pydantic request models for the column mapping API."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class AnalyzeCSVRequest(BaseModel):
    """Request model for analyzing raw CSV text."""

    content: str = Field(..., description="CSV file content (header row first)")
    sample_rows: Optional[int] = Field(None, ge=0, le=100, description="Data rows sampled for tie-breaks")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject blank content before it reaches the analyzer."""
        if not v.strip():
            raise ValueError("CSV content is required")
        return v


class AnalyzeHeadersRequest(BaseModel):
    """Request model for analyzing a pre-parsed header list."""

    headers: List[str] = Field(..., description="Header strings in file order")
    sample_rows: List[List[Optional[str]]] = Field(
        default_factory=list,
        description="Optional data rows aligned with headers",
    )


class ResolveMappingRequest(BaseModel):
    """Request model for merging user overrides over a recommended mapping."""

    headers: List[str] = Field(..., description="Headers of the analyzed file")
    recommended_mapping: Dict[str, str] = Field(
        default_factory=dict,
        description="header -> field from a previous analysis",
    )
    overrides: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="header -> field, 'skip' or null to unmap",
    )
