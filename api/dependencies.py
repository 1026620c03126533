"""FastAPI dependencies for services."""

from functools import lru_cache

from core.column_mapping import ColumnMappingService
from core.config import get_config


@lru_cache()
def get_mapping_service() -> ColumnMappingService:
    """
    Get the column mapping service.

    The service only holds the read-only registry and scoring settings, so one
    instance is shared across requests.

    Returns:
        ColumnMappingService instance
    """
    return ColumnMappingService.from_config(get_config())
