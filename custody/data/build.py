"""
Model build module for the custody service
Imports every model so SQLAlchemy's metadata knows all tables
"""

from custody import db
from custody.utils.logger import get_logger

logger = get_logger("custody.models")


def build_models():
    """
    Register all models. Importing is enough for SQLAlchemy; table creation
    happens in create_tables() or through migrations.
    """
    import custody.data.core.user_info.user  # noqa: F401
    import custody.data.core.organization  # noqa: F401
    import custody.data.core.item  # noqa: F401
    import custody.data.core.item_change_log  # noqa: F401
    import custody.data.core.sequences.document_sequence  # noqa: F401
    import custody.data.lifecycle.indent  # noqa: F401
    import custody.data.lifecycle.order  # noqa: F401
    import custody.data.lifecycle.inward  # noqa: F401
    import custody.data.lifecycle.quality_control  # noqa: F401
    import custody.data.lifecycle.job_work  # noqa: F401
    import custody.data.lifecycle.outward  # noqa: F401
    import custody.data.lifecycle.movement  # noqa: F401


def create_tables():
    """Create all tables for the registered models (requires an app context)."""
    build_models()
    db.create_all()
    logger.info("All database tables created")
