"""
Maps domain exceptions to JSON error responses
"""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from custody.buisness.lifecycle.errors import LifecycleDomainError, LifecycleIntegrityError
from custody.utils.logger import get_logger

logger = get_logger("custody.routes.errors")


def register_error_handlers(app):

    @app.errorhandler(LifecycleDomainError)
    def handle_domain_error(error):
        if error.http_status >= 500:
            logger.error(f"{request.method} {request.path} failed: {error.kind}")
        else:
            logger.info(f"{request.method} {request.path} -> {error.http_status} {error.kind}: {error.message}")
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'success': False,
            'error': error.name.lower().replace(' ', '_'),
            'message': error.description,
        }), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return jsonify(LifecycleIntegrityError().to_dict()), 500
