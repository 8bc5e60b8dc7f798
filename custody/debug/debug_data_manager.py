#!/usr/bin/env python3
"""
Debug Data Manager
Loads the sample company, locations, parties, users and items

Handles:
- Loading the debug data JSON file
- Skipping when the sample company is already present
- Registering items and receiving opening stock through the lifecycle managers
- Fail-fast error handling
"""

from pathlib import Path
import json
from custody import db
from custody.utils.logger import get_logger

logger = get_logger("custody.debug_data_manager")


def insert_debug_data(enabled=True):
    """
    Insert debug data.

    Args:
        enabled (bool): Whether to insert debug data (default: True)

    Returns:
        dict: Summary of inserted data

    Raises:
        Exception: If any debug data insertion fails (fail-fast)
    """
    if not enabled:
        logger.info("Debug data insertion is disabled")
        return {}

    from custody.data.core.user_info.user import User

    system_user = User.query.filter_by(username='system').first()
    if not system_user:
        logger.error("System user not found - cannot insert debug data without system user")
        raise RuntimeError("System user not found - critical data must be inserted first")

    debug_data = _load_debug_data_file('core')
    if not debug_data:
        logger.info("No debug data file found, skipping")
        return {'status': 'skipped', 'reason': 'file_not_found'}

    if _check_debug_data_present(debug_data):
        logger.info("Debug data already present, skipping")
        return {'status': 'skipped', 'reason': 'data_present'}

    try:
        summary = _insert_core_debug_data(debug_data, system_user.id)
    except Exception as e:
        logger.error(f"Failed to insert debug data: {e}")
        db.session.rollback()
        raise

    logger.info(f"Debug data insertion completed successfully: {summary}")
    return summary


def _load_debug_data_file(module_name):
    debug_file = Path(__file__).parent / 'data' / f'{module_name}.json'
    if not debug_file.exists():
        return None
    with open(debug_file, 'r') as f:
        data = json.load(f)
    logger.debug(f"Loaded debug data file: {debug_file}")
    return data


def _check_debug_data_present(debug_data):
    from custody.data.core.organization import Company

    name = debug_data.get('Company', {}).get('name')
    return bool(name) and Company.query.filter_by(name=name).first() is not None


def _insert_core_debug_data(debug_data, system_user_id):
    """
    Company, locations, parties and users are plain inserts; items and opening
    stock go through ItemManager / InwardManager so their state is derived
    like any other item's.
    """
    from custody.data.core.organization import Company, Location, Party
    from custody.data.core.user_info.user import User
    from custody.buisness.lifecycle.context import OrgContext, LifecycleContext
    from custody.buisness.lifecycle.managers import ItemManager, InwardManager

    company, _ = Company.find_or_create_from_dict(
        debug_data['Company'], user_id=system_user_id, lookup_fields=['name'], commit=False)
    db.session.flush()

    locations = []
    for loc_data in debug_data.get('Locations', []):
        location, _ = Location.find_or_create_from_dict(
            dict(loc_data, company_id=company.id), user_id=system_user_id,
            lookup_fields=['company_id', 'name'], commit=False)
        locations.append(location)

    for party_data in debug_data.get('Parties', []):
        Party.find_or_create_from_dict(
            dict(party_data, company_id=company.id), user_id=system_user_id,
            lookup_fields=['company_id', 'name'], commit=False)

    for user_data in debug_data.get('Users', []):
        user, created = User.find_or_create_from_dict(user_data, lookup_fields=['username'], commit=False)
        if created:
            token = user.issue_api_token()
            logger.info(f"Debug user {user.username} token: {token}")
    db.session.commit()

    ctx = LifecycleContext(actor_id=system_user_id,
                           org=OrgContext(company_id=company.id,
                                          location_id=locations[0].id if locations else None))
    items = {}
    for item_data in debug_data.get('Items', []):
        item = ItemManager(ctx).register(**item_data)
        items[item.main_part_name] = item

    opening = [{'item_id': items[name].id, 'remarks': 'Opening stock'}
               for name in debug_data.get('OpeningStock', []) if name in items]
    if opening and locations:
        InwardManager(ctx).create(opening, remarks='Opening stock (debug data)')

    return {
        'company': company.name,
        'locations': len(locations),
        'items': len(items),
        'opening_stock': len(opening),
    }
