from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
from custody.utils.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"],
    storage_uri="memory://"  # Use Redis when several workers share the limits
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    """
    Build the Flask application.

    Args:
        config_overrides (dict, optional): Values applied on top of the
            environment-derived configuration (used by tests and scripts)

    Returns:
        Flask: Configured application
    """
    from pathlib import Path

    app = Flask(__name__)

    logger = get_logger("custody")
    logger.info("Initializing Flask application")

    # Configuration
    # SECURITY: Require SECRET_KEY in environment - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL; otherwise keep the SQLite database in
    # the project's `instance/` directory so path resolution is reliable.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        base_dir = Path(__file__).parent.parent
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'custody.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Rate limiting
    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')
    if os.environ.get('RATELIMIT_DEFAULT'):
        app.config['RATELIMIT_DEFAULT'] = os.environ['RATELIMIT_DEFAULT']

    # Document numbering: include the location id in generated codes
    app.config['DOCUMENT_CODE_PER_LOCATION'] = _env_flag('DOCUMENT_CODE_PER_LOCATION', 'True')

    if config_overrides:
        app.config.update(config_overrides)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    logger.debug(f"Database configured: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from custody.data.build import build_models
    build_models()

    logger.debug("Models imported and registered")

    # Permission gate (token loader) and API blueprints
    import custody.auth  # noqa: F401
    from custody.presentation.routes import init_app as init_routes
    init_routes(app)

    # Add security headers to all responses
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        # Prevent MIME-sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'
        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['Cache-Control'] = 'no-store'
        return response

    logger.info("Flask application initialization complete")

    return app
