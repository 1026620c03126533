"""Custom exceptions for column mapping."""


class ColumnMappingError(Exception):
    """Base exception for column mapping errors."""
    pass


class InvalidInputError(ColumnMappingError):
    """Header input is malformed (non-string, undecodable, duplicated, ragged)."""
    pass


class EmptyInputError(ColumnMappingError):
    """No headers were supplied."""
    pass


class InvalidRegistryError(ColumnMappingError):
    """Canonical field registry failed validation at load time."""
    pass


class InvalidOverrideError(ColumnMappingError):
    """Caller-supplied mapping override is inconsistent."""
    pass
