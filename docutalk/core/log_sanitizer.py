"""
Helpers for logging values that originate from clients.
"""

import re
from typing import Any

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1f\x7f-\x9f]')
# Matches Unicode line separators (LINE SEPARATOR and PARAGRAPH SEPARATOR)
_UNICODE_NEWLINES_RE = re.compile(r'[\u2028\u2029]')
_STANDARD_NEWLINES_RE = re.compile(r'(\r\n|\r|\n)')


def sanitize_for_logging(value: Any) -> str:
    """
    Sanitize a value for safe logging by removing newlines and control
    characters, to defend against log injection.

    Examples:
        >>> sanitize_for_logging("Hello\\nWorld")
        'HelloWorld'
        >>> sanitize_for_logging("Fake\u2028Log")
        'FakeLog'
        >>> sanitize_for_logging(123)
        '123'
    """
    if value is None:
        return ''
    if not isinstance(value, str):
        value = str(value)
    value = _CONTROL_CHARS_RE.sub('', value)
    value = _UNICODE_NEWLINES_RE.sub('', value)
    value = _STANDARD_NEWLINES_RE.sub('', value)
    return value


def preview_for_logging(value: Any, limit: int = 100) -> str:
    """Sanitized, truncated preview of user text for DEBUG logs."""
    text = sanitize_for_logging(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text
