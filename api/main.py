"""FastAPI application for CSV column mapping."""

import logging
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.exceptions import ContentTooLargeError
from api.routers import csv_mapping
from core.column_mapping import (
    EmptyInputError,
    InvalidInputError,
    InvalidOverrideError,
    InvalidRegistryError,
)
from core.config import get_config

config = get_config()

# Configure logging
logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Agent CSV Column Mapping API",
    description="Recommends mappings from arbitrary CSV headers onto canonical agent configuration fields",
    version="1.0.0",
)

# CORS origins can be set via CORS_ORIGINS env var as comma-separated list
cors_origins_str: str = getattr(config, "cors_origins", "")
cors_origins: List[str] = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()] if cors_origins_str else []

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],  # Default to * for development
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Exception handlers
@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    """Handle malformed header input."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error_type": "InvalidInputError"},
    )


@app.exception_handler(EmptyInputError)
async def empty_input_handler(request: Request, exc: EmptyInputError):
    """Handle empty header input."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "error_type": "EmptyInputError"},
    )


@app.exception_handler(InvalidOverrideError)
async def invalid_override_handler(request: Request, exc: InvalidOverrideError):
    """Handle inconsistent mapping overrides."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error_type": "InvalidOverrideError"},
    )


@app.exception_handler(ContentTooLargeError)
async def content_too_large_handler(request: Request, exc: ContentTooLargeError):
    """Handle oversized CSV content."""
    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content={"detail": str(exc), "error_type": "ContentTooLargeError"},
    )


@app.exception_handler(InvalidRegistryError)
async def invalid_registry_handler(request: Request, exc: InvalidRegistryError):
    """Handle a misconfigured field registry."""
    logger.error(f"Field registry error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "error_type": "InvalidRegistryError"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    # Convert errors to JSON-serializable format
    serializable_errors = []
    for error in exc.errors():
        serializable_error = {}
        for key, value in error.items():
            if isinstance(value, Exception):
                serializable_error[key] = str(value)
            elif isinstance(value, dict):
                # pydantic puts the raised ValueError under ctx["error"]
                serializable_error[key] = {
                    k: str(v) if isinstance(v, Exception) else v for k, v in value.items()
                }
            else:
                serializable_error[key] = value
        serializable_errors.append(serializable_error)

    logger.warning(f"Validation error: {serializable_errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": serializable_errors, "error_type": "ValidationError"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc) or "Internal server error", "error_type": type(exc).__name__},
    )


# Include routers
app.include_router(csv_mapping.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Agent CSV Column Mapping API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
