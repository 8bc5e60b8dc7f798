"""
Pytest configuration and fixtures for the custody tests

Every test gets a fresh in-memory database, a company with two locations,
two parties, and a LifecycleContext acting as an admin user.
"""
import os

os.environ.setdefault('LOG_TO_FILE', 'false')
os.environ.setdefault('LOG_LEVEL', 'WARNING')

import pytest
from flask import g
from custody import create_app
from custody import db as _db
from custody.data.build import create_tables
from custody.buisness.lifecycle.context import OrgContext, LifecycleContext


@pytest.fixture(scope='function')
def app():
    """Create Flask application for testing"""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'RATELIMIT_ENABLED': False,
    })

    with app.app_context():
        create_tables()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db(app):
    return _db


@pytest.fixture(scope='function')
def org(db):
    """Company, two locations, a vendor and a job worker."""
    from custody.data.core.organization import Company, Location, Party
    from custody.data.core.user_info.user import User

    admin = User(username='admin', is_admin=True)
    db.session.add(admin)
    db.session.flush()

    company = Company(name='Acme Tools', created_by_id=admin.id)
    db.session.add(company)
    db.session.flush()

    stores = Location(name='Stores', company_id=company.id, created_by_id=admin.id)
    plant = Location(name='Plant 2', company_id=company.id, created_by_id=admin.id)
    vendor = Party(name='Vendor One', company_id=company.id, party_type='Vendor')
    job_worker = Party(name='Heat Treat Co', company_id=company.id, party_type='JobWorker')
    db.session.add_all([stores, plant, vendor, job_worker])
    db.session.commit()

    return {
        'admin': admin,
        'company': company,
        'stores': stores,
        'plant': plant,
        'vendor': vendor,
        'job_worker': job_worker,
    }


@pytest.fixture(scope='function')
def ctx(org):
    """Admin acting at the Stores location."""
    return LifecycleContext(actor_id=org['admin'].id,
                            org=OrgContext(company_id=org['company'].id, location_id=org['stores'].id))


@pytest.fixture(scope='function')
def plant_ctx(org):
    return LifecycleContext(actor_id=org['admin'].id,
                            org=OrgContext(company_id=org['company'].id, location_id=org['plant'].id))


@pytest.fixture(scope='function')
def make_item(ctx):
    """Factory: register an item (NotInStock)."""
    from custody.buisness.lifecycle.managers import ItemManager

    counter = {'n': 0}

    def _make(name=None):
        counter['n'] += 1
        return ItemManager(ctx).register(name or f'PART-{counter["n"]:03d}')
    return _make


@pytest.fixture(scope='function')
def stocked_item(ctx, make_item):
    """Factory: an item received as opening stock at Stores and passed QC."""
    from custody.buisness.lifecycle.managers import InwardManager, QCManager

    def _make(name=None):
        item = make_item(name)
        inward = InwardManager(ctx).create([{'item_id': item.id}])
        entry = QCManager(ctx).create([inward.lines[0].id])
        QCManager(ctx).resolve_item(entry.items[0].id, 'Approved')
        QCManager(ctx).approve(entry.id)
        return item
    return _make


@pytest.fixture(scope='function')
def assert_consistent(db):
    """Check the holder invariant and that the cached state matches the derived one."""
    from custody.data.core.item import Item
    from custody.buisness.lifecycle.state_engine import ItemStateEngine

    def _check(*items):
        for item in items:
            row = db.session.get(Item, item.id)
            assert row.holder_is_consistent(), f"holder invariant broken for item {row.id}"
            assert ItemStateEngine.check(row) is None, f"state drift on item {row.id}"
    return _check


class ApiClient:
    """
    Thin wrapper over the Flask test client that sends the bearer token and
    org headers. The test app context is shared with requests, so the user
    Flask-Login cached on `g` is cleared before every call.
    """

    def __init__(self, client, company_id, location_id):
        self.client = client
        self.company_id = company_id
        self.location_id = location_id
        self.token = None

    def headers(self, location_id=None):
        headers = {'X-Company-Id': str(self.company_id)}
        location = location_id if location_id is not None else self.location_id
        if location is not None:
            headers['X-Location-Id'] = str(location)
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _call(self, method, url, json=None, location_id=None):
        g.pop('_login_user', None)
        return self.client.open(f'/api{url}', method=method, json=json,
                                headers=self.headers(location_id))

    def get(self, url, **kwargs):
        return self._call('GET', url, **kwargs)

    def post(self, url, json=None, **kwargs):
        return self._call('POST', url, json=json if json is not None else {}, **kwargs)

    def put(self, url, json=None, **kwargs):
        return self._call('PUT', url, json=json if json is not None else {}, **kwargs)


@pytest.fixture(scope='function')
def make_user(db):
    """Factory: user with the given permissions, returns (user, token)."""
    from custody.data.core.user_info.user import User

    def _make(username, *permissions, is_admin=False):
        user = User(username=username, is_admin=is_admin)
        db.session.add(user)
        user.grant(*permissions)
        token = user.issue_api_token()
        db.session.commit()
        return user, token
    return _make


@pytest.fixture(scope='function')
def api(app, org):
    return ApiClient(app.test_client(), org['company'].id, org['stores'].id)


@pytest.fixture(scope='function')
def admin_api(api, make_user):
    _, token = make_user('api-admin', is_admin=True)
    api.token = token
    return api
