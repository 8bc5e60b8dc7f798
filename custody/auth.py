"""
Permission gate and request context for the JSON API.

Callers authenticate with "Authorization: Bearer <user_id>.<secret>" and
scope the request with X-Company-Id / X-Location-Id headers.
"""

from functools import wraps
from flask import request, jsonify
from flask_login import current_user
from custody import db, login_manager
from custody.data.core.user_info.user import User
from custody.buisness.lifecycle.context import OrgContext, LifecycleContext
from custody.buisness.lifecycle.errors import PermissionDenied, LifecyclePolicyViolation, DocumentNotFound
from custody.utils.logger import get_logger

logger = get_logger("custody.auth")


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.request_loader
def load_user_from_request(req):
    header = req.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    user_id, _, secret = token.partition('.')
    if not user_id.isdigit() or not secret:
        logger.debug("Malformed bearer token")
        return None

    user = db.session.get(User, int(user_id))
    if user is None or not user.is_active or not user.check_api_token(secret):
        logger.warning(f"Rejected API token for user id {user_id}")
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({
        'success': False,
        'error': 'unauthenticated',
        'message': 'A valid bearer token is required',
    }), 401


def permission_required(action):
    """
    Require an authenticated caller holding `action`.

    Runs before the view parses anything, so a caller without the
    permission gets 403 and no work is done.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return login_manager.unauthorized()
            if not current_user.has_permission(action):
                logger.warning(f"User {current_user.username} denied '{action}'")
                raise PermissionDenied(action)
            return view(*args, **kwargs)
        return wrapped
    return decorator


def _header_int(name):
    raw = request.headers.get(name)
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except ValueError:
        raise LifecyclePolicyViolation(f"{name} must be an integer")


def resolve_org_context():
    """Resolve X-Company-Id / X-Location-Id into an OrgContext."""
    from custody.data.core.organization import Company, Location

    company_id = _header_int('X-Company-Id')
    if company_id is None:
        raise LifecyclePolicyViolation("X-Company-Id header is required")
    company = db.session.get(Company, company_id)
    if company is None or not company.is_active:
        raise DocumentNotFound('Company', company_id)

    location_id = _header_int('X-Location-Id')
    if location_id is not None:
        location = db.session.get(Location, location_id)
        if location is None or location.company_id != company_id:
            raise DocumentNotFound('Location', location_id)

    return OrgContext(company_id=company_id, location_id=location_id)


def current_lifecycle_context():
    return LifecycleContext(actor_id=current_user.id, org=resolve_org_context())
