"""Shared fixtures for column mapping tests."""

import pytest

from core.column_mapping import ColumnMappingService, ColumnMatcher, get_registry


@pytest.fixture
def registry():
    return get_registry()


@pytest.fixture
def matcher():
    return ColumnMatcher()


@pytest.fixture
def service(registry):
    return ColumnMappingService(registry=registry)


@pytest.fixture
def fuzzy_headers():
    """Headers from a hand-written agent export."""
    return ["Agent Name", "AI Model", "Directory Path", "Labels", "Memory MB", "CPU Count", "Auto Start"]
