"""CSV column mapping API router."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from api.dependencies import get_mapping_service
from api.exceptions import ContentTooLargeError
from api.models.requests import AnalyzeCSVRequest, AnalyzeHeadersRequest, ResolveMappingRequest
from api.models.responses import (
    AnalysisResponse,
    FieldRegistryResponse,
    ResolveMappingResponse,
    UploadAnalysisResponse,
)
from core.column_mapping import ColumnMappingService
from core.config import get_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/csv", tags=["csv"])


def _check_size(size: int) -> None:
    limit = get_config().mapping.max_content_bytes
    if size > limit:
        raise ContentTooLargeError(f"CSV content is {size} bytes; the limit is {limit} bytes")


@router.get("/fields", response_model=FieldRegistryResponse)
def get_fields(mapping_service: ColumnMappingService = Depends(get_mapping_service)):
    """
    List the canonical fields columns can be mapped to.

    Returns:
        Registry version and field definitions
    """
    return mapping_service.registry.to_dict()


@router.post("/analyze", response_model=AnalysisResponse)
def analyze_csv(
    request: AnalyzeCSVRequest,
    mapping_service: ColumnMappingService = Depends(get_mapping_service),
):
    """
    Analyze CSV text and recommend column mappings.

    Args:
        request: CSV content and optional sample row count
        mapping_service: Column mapping service dependency

    Returns:
        Analysis with recommended mapping and per-column diagnostics
    """
    _check_size(len(request.content.encode("utf-8")))
    result = mapping_service.analyze_csv(request.content, sample_rows=request.sample_rows)
    return result.to_dict()


@router.post("/analyze-headers", response_model=AnalysisResponse)
def analyze_headers(
    request: AnalyzeHeadersRequest,
    mapping_service: ColumnMappingService = Depends(get_mapping_service),
):
    """
    Analyze a pre-parsed header list.

    Args:
        request: Headers and optional sample rows
        mapping_service: Column mapping service dependency

    Returns:
        Analysis with recommended mapping and per-column diagnostics
    """
    result = mapping_service.analyze_headers(request.headers, request.sample_rows)
    return result.to_dict()


@router.post("/upload", response_model=UploadAnalysisResponse)
async def upload_csv(
    file: UploadFile = File(..., description="CSV file"),
    mapping_service: ColumnMappingService = Depends(get_mapping_service),
):
    """
    Analyze an uploaded CSV file.

    Args:
        file: Uploaded CSV file
        mapping_service: Column mapping service dependency

    Returns:
        Filename, size and analysis
    """
    content = await file.read()
    _check_size(len(content))
    logger.info(f"Analyzing uploaded file {file.filename} ({len(content)} bytes)")
    result = mapping_service.analyze_csv(content)
    return {
        "filename": file.filename,
        "size": len(content),
        "analysis": result.to_dict(),
    }


@router.post("/mapping/resolve", response_model=ResolveMappingResponse)
def resolve_mapping(
    request: ResolveMappingRequest,
    mapping_service: ColumnMappingService = Depends(get_mapping_service),
):
    """
    Merge user overrides over a recommended mapping.

    Args:
        request: Headers, recommended mapping and overrides
        mapping_service: Column mapping service dependency

    Returns:
        Final mapping and any required fields it leaves unassigned
    """
    mapping = mapping_service.resolve_mapping(
        request.headers, request.recommended_mapping, request.overrides
    )
    assigned = set(mapping.values())
    return {
        "mapping": mapping,
        "missing_required_fields": [
            key for key in mapping_service.registry.required_keys if key not in assigned
        ],
    }
