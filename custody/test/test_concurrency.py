"""
Two sessions racing for the same item on a file-backed database.

A competing request commits between the first request's checks and its
writes; the first request must then fail instead of claiming the item a
second time.
"""
import threading

import pytest
from custody import create_app
from custody import db as _db
from custody.data.build import create_tables
from custody.buisness.lifecycle.managers import IndentManager, OrderManager, InwardManager, QCManager
from custody.buisness.lifecycle.policies import OrderEligibilityPolicy, QCClaimPolicy
from custody.buisness.lifecycle.errors import ConcurrentModificationError
from custody.data.lifecycle.order import Order, OrderItem
from custody.data.lifecycle.quality_control import QCItem


@pytest.fixture(scope='function')
def app(tmp_path):
    """Same as the shared fixture, but each session gets its own connection."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'custody.db'}",
        'RATELIMIT_ENABLED': False,
    })

    with app.app_context():
        create_tables()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


def run_in_other_session(app, operation):
    """Run operation in a separate thread and app context, and commit it before returning."""
    errors = []

    def target():
        with app.app_context():
            try:
                operation()
            except Exception as e:
                errors.append(e)
            finally:
                _db.session.remove()

    worker = threading.Thread(target=target)
    worker.start()
    worker.join()
    if errors:
        raise errors[0]


def race_after_check(monkeypatch, policy, competitor):
    """Patch policy.check so the competitor commits right after the first check passes."""
    original = policy.check.__func__
    raced = {'done': False}

    def check_then_race(cls, *args, **kwargs):
        result = original(cls, *args, **kwargs)
        if not raced['done']:
            raced['done'] = True
            competitor()
        return result

    monkeypatch.setattr(policy, 'check', classmethod(check_then_race))
    return raced


def test_indent_item_cannot_be_ordered_twice(app, ctx, org, make_item, monkeypatch):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])
    IndentManager(ctx).approve(indent.id)
    indent_item_id = indent.items[0].id
    vendor_id = org['vendor'].id

    def competing_order():
        run_in_other_session(app, lambda: OrderManager(ctx).create(
            vendor_id, [{'indent_item_id': indent_item_id}]))

    raced = race_after_check(monkeypatch, OrderEligibilityPolicy, competing_order)

    with pytest.raises(ConcurrentModificationError) as exc:
        OrderManager(ctx).create(vendor_id, [{'indent_item_id': indent_item_id}])

    assert raced['done']
    assert exc.value.retryable
    active = (OrderItem.query.join(Order, Order.id == OrderItem.order_id)
              .filter(OrderItem.indent_item_id == indent_item_id, Order.is_active.is_(True))
              .count())
    assert active == 1


def test_inward_line_cannot_enter_two_pending_qc_entries(app, ctx, make_item, monkeypatch):
    item = make_item()
    inward = InwardManager(ctx).create([{'item_id': item.id}])
    line_id = inward.lines[0].id

    def competing_entry():
        run_in_other_session(app, lambda: QCManager(ctx).create([line_id]))

    raced = race_after_check(monkeypatch, QCClaimPolicy, competing_entry)

    with pytest.raises(ConcurrentModificationError):
        QCManager(ctx).create([line_id])

    assert raced['done']
    assert QCItem.query.filter_by(inward_line_id=line_id).count() == 1
