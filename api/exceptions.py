"""Custom exceptions for API."""


class ContentTooLargeError(Exception):
    """Raised when uploaded CSV content exceeds the configured size limit."""

    pass
