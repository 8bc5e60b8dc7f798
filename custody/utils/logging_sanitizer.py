"""
Logging Sanitizer Utility

Redacts credentials from request payloads and headers before they are logged.
"""

from typing import Dict, Any, Mapping


# Fields that should never be logged
SENSITIVE_FIELDS = {
    'password',
    'secret',
    'token',
    'api_key',
    'apikey',
    'api_token',
    'auth_token',
    'access_token',
    'refresh_token',
    'authorization',
    'session_id',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Nested dictionaries and dictionaries inside lists (e.g. document lines)
    are sanitized recursively.

    Example:
        >>> sanitize_dict({'remarks': 'ok', 'api_token': 'abc'})
        {'remarks': 'ok', 'api_token': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(entry, redact_text) if isinstance(entry, dict) else entry
                for entry in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_headers(headers: Mapping[str, str], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """Sanitize request headers (Authorization etc.) for safe logging."""
    return sanitize_dict(dict(headers), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """
    Sanitize exception messages to ensure they don't contain sensitive data.

    Args:
        exception: Exception to sanitize

    Returns:
        Sanitized exception message
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
