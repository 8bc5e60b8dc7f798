"""
Routes package for the custody service
"""

from custody.utils.logger import get_logger

logger = get_logger("custody.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from .api import api_bp
    from .api.errors import register_error_handlers

    app.register_blueprint(api_bp, url_prefix='/api')
    register_error_handlers(app)

    logger.debug("API blueprint registered at /api")
