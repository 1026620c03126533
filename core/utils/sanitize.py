"""Utilities for making user-supplied text safe to log."""

import re
from typing import Optional

_CONTROL = re.compile(r"[\x00-\x1f\x7f]+")


def sanitize_for_logging(value: Optional[str], max_length: int = 200) -> str:
    """
    Sanitize a header or cell value for logging.

    Control characters (including embedded newlines from quoted CSV headers)
    are replaced by a single space and long values are truncated.

    Args:
        value: Value to sanitize
        max_length: Maximum length to return

    Returns:
        Sanitized string
    """
    if value is None:
        return ""

    value_str = _CONTROL.sub(" ", str(value))
    if len(value_str) > max_length:
        return value_str[:max_length] + "..."

    return value_str
