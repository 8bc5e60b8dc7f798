"""
Request parsing and response helpers shared by the API route modules
"""

from datetime import date
from flask import jsonify, request
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.utils.logging_sanitizer import sanitize_dict
from custody.utils.logger import get_logger

logger = get_logger("custody.routes.api")


def ok(data, status=200):
    return jsonify({'success': True, 'data': data}), status


def json_payload():
    """The request body as a dict; anything else is a validation error."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LifecyclePolicyViolation("Request body must be a JSON object")
    logger.debug(f"{request.method} {request.path} payload: {sanitize_dict(data)}")
    return data


def optional_int(data, key):
    value = data.get(key)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise LifecyclePolicyViolation(f"{key} must be an integer")


def required_int(data, key):
    value = optional_int(data, key)
    if value is None:
        raise LifecyclePolicyViolation(f"{key} is required")
    return value


def int_list(data, key, required=True):
    values = data.get(key)
    if values is None:
        if required:
            raise LifecyclePolicyViolation(f"{key} is required")
        return None
    if not isinstance(values, list):
        raise LifecyclePolicyViolation(f"{key} must be a list")
    try:
        return [int(v) for v in values]
    except (TypeError, ValueError):
        raise LifecyclePolicyViolation(f"{key} must contain integers")


def dict_list(data, key, required=True):
    values = data.get(key)
    if values is None:
        if required:
            raise LifecyclePolicyViolation(f"{key} is required")
        return None
    if not isinstance(values, list) or not all(isinstance(v, dict) for v in values):
        raise LifecyclePolicyViolation(f"{key} must be a list of objects")
    return values


def url_list(data, key='attachment_urls'):
    values = data.get(key)
    if values is None:
        return None
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise LifecyclePolicyViolation(f"{key} must be a list of URL strings")
    return values


def optional_date(data, key):
    value = data.get(key)
    if value in (None, ''):
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise LifecyclePolicyViolation(f"{key} must be an ISO date (YYYY-MM-DD)")


def optional_bool(data, key):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise LifecyclePolicyViolation(f"{key} must be true or false")
