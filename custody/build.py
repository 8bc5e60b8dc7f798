#!/usr/bin/env python3
"""
Main build orchestrator for the custody service
Creates tables, guarantees the critical users and optionally loads debug data
"""

import os
from custody import create_app, db
from custody.utils.logger import get_logger

logger = get_logger("custody.build")


def verify_critical_data():
    """
    Check that the system and admin users exist.

    Returns:
        bool: True if all critical data is present
    """
    from custody.data.core.user_info.user import User

    system_user = User.query.filter_by(username='system').first()
    if not system_user:
        logger.warning("System user not found")
        return False
    admin_user = User.query.filter_by(username='admin').first()
    if not admin_user:
        logger.warning("Admin user not found")
        return False
    return True


def insert_critical_data():
    """
    Insert the system and admin users. Runs on every build.

    The admin API token is taken from ADMIN_API_TOKEN_SECRET when set,
    otherwise a fresh token is issued and logged once.
    """
    from custody.data.core.user_info.user import User
    from werkzeug.security import generate_password_hash

    if verify_critical_data():
        logger.info("Critical data already present, skipping insertion")
        return

    logger.warning("Critical data missing, inserting system and admin users...")
    try:
        system_user, _ = User.find_or_create_from_dict(
            {'username': 'system', 'is_system': True, 'is_admin': True},
            lookup_fields=['username'], commit=False,
        )
        admin_user, created = User.find_or_create_from_dict(
            {'username': 'admin', 'email': os.environ.get('ADMIN_EMAIL'), 'is_admin': True},
            lookup_fields=['username'], commit=False,
        )
        if created:
            secret = os.environ.get('ADMIN_API_TOKEN_SECRET')
            if secret:
                db.session.flush()
                admin_user.api_token_hash = generate_password_hash(secret)
                logger.info(f"Admin token configured from environment (user id {admin_user.id})")
            else:
                token = admin_user.issue_api_token()
                logger.warning(f"Issued admin API token (shown once): {token}")
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Critical data insertion failed: {e}")
        raise

    if not verify_critical_data():
        raise RuntimeError("Critical data insertion completed but verification failed")
    logger.info("Successfully inserted critical data")


def build_database(enable_debug_data=False, app=None):
    """
    Build tables and insert data.

    Args:
        enable_debug_data (bool): Load the sample company, locations, parties and items
        app (Flask, optional): Application to build against; created when omitted
    """
    from custody.data.build import create_tables

    app = app or create_app()
    with app.app_context():
        logger.info(f"Starting database build (debug data: {enable_debug_data})")
        create_tables()
        insert_critical_data()

        if enable_debug_data:
            from custody.debug.debug_data_manager import insert_debug_data
            insert_debug_data(enabled=True)

        logger.info("Database build completed successfully")


if __name__ == '__main__':
    build_database(enable_debug_data=True)
