"""
Inward receipt, QC inspection and inward edits.
"""
import pytest
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.managers import (
    IndentManager, OrderManager, InwardManager, QCManager, JobWorkManager,
)
from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import (
    ItemProcessState, HolderType, QCStatus, QCResolution, JobWorkStatus, SourceType,
)
from custody.buisness.lifecycle.errors import (
    ItemStateConflict, LifecyclePolicyViolation, LifecycleTransitionError,
    LifecycleIntegrityError, DocumentNotFound,
)
from custody.data.core.item import Item
from custody.data.lifecycle.inward import InwardLine
from custody.data.lifecycle.quality_control import QCEntry
from custody.data.lifecycle.job_work import JobWork
from custody.services.lifecycle.selection_service import SelectionService


@pytest.fixture
def approved_order(ctx, org, make_item):
    """Approved order over two fresh items."""
    def _make():
        a, b = make_item(), make_item()
        indent = IndentManager(ctx).create([a.id, b.id])
        IndentManager(ctx).approve(indent.id)
        order = OrderManager(ctx).create(
            org['vendor'].id, [{'indent_item_id': line.id} for line in indent.items])
        OrderManager(ctx).approve(order.id)
        return order, a, b
    return _make


def _qc_all(ctx, inward, resolution='Approved'):
    entry = QCManager(ctx).create([line.id for line in inward.lines])
    for qc_item in entry.items:
        QCManager(ctx).resolve_item(qc_item.id, resolution)
    QCManager(ctx).approve(entry.id)
    return entry


def test_opening_stock_inward_and_qc(ctx, org, make_item):
    item = make_item()

    inward = InwardManager(ctx).create([{'item_id': item.id}], remarks='Opening balance')

    assert inward.location_id == org['stores'].id
    assert inward.party_id is None
    line = inward.lines[0]
    assert line.source_type is None and line.is_qc_pending is True
    assert line.from_holder_type == HolderType.NOT_IN_STOCK
    assert item.holder_type == HolderType.LOCATION
    assert item.current_location_id == org['stores'].id
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_QC

    entry = _qc_all(ctx, inward)

    assert entry.status == QCStatus.APPROVED
    assert entry.decided_by_id == org['admin'].id
    assert line.is_qc_pending is False and line.is_qc_approved is True
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_STOCK
    assert item.process_state == ItemProcessState.IN_STOCK


def test_inward_requires_location(org, make_item):
    from custody.buisness.lifecycle.context import OrgContext, LifecycleContext
    no_location = LifecycleContext(actor_id=org['admin'].id, org=OrgContext(company_id=org['company'].id))

    with pytest.raises(LifecyclePolicyViolation):
        InwardManager(no_location).create([{'item_id': make_item().id}])


def test_order_inward_takes_vendor_and_closes_order(ctx, org, approved_order, assert_consistent):
    order, a, b = approved_order()

    inward = InwardManager(ctx).create([
        {'item_id': a.id, 'order_id': order.id},
        {'item_id': b.id, 'source_type': SourceType.ORDER, 'source_ref_id': order.id},
    ])

    assert inward.party_id == org['vendor'].id
    assert {line.source_type for line in inward.lines} == {SourceType.ORDER}
    assert ItemStateEngine.get_state(a.id) == ItemProcessState.IN_QC
    assert_consistent(a, b)

    with pytest.raises(LifecyclePolicyViolation, match='fully inwarded'):
        InwardManager(ctx).create([{'item_id': a.id, 'order_id': order.id}])


def test_order_inward_only_once_per_item(ctx, approved_order):
    order, a, b = approved_order()
    InwardManager(ctx).create([{'item_id': a.id, 'order_id': order.id}])

    with pytest.raises(LifecyclePolicyViolation, match='already been inwarded'):
        InwardManager(ctx).create([{'item_id': a.id, 'order_id': order.id}])


def test_inward_rejects_item_not_on_order(ctx, approved_order, make_item):
    order, _, _ = approved_order()
    stranger = make_item()

    with pytest.raises(LifecyclePolicyViolation, match='not on order'):
        InwardManager(ctx).create([{'item_id': stranger.id, 'order_id': order.id}])


def test_inward_line_takes_a_single_source(ctx, approved_order):
    order, a, _ = approved_order()

    with pytest.raises(LifecyclePolicyViolation):
        InwardManager(ctx).create([{'item_id': a.id, 'order_id': order.id, 'job_work_id': 1}])



def test_inward_source_id_must_be_an_integer(ctx, make_item):
    item = make_item()

    with pytest.raises(LifecyclePolicyViolation, match='order_id must be an integer'):
        InwardManager(ctx).create([{'item_id': item.id, 'order_id': 'abc'}])
    with pytest.raises(LifecyclePolicyViolation, match='source_ref_id must be an integer'):
        InwardManager(ctx).create([{'item_id': item.id, 'source_type': 'Order', 'source_ref_id': 'x1'}])

    assert ItemStateEngine.get_state(item.id) == ItemProcessState.NOT_IN_STOCK


def test_opening_stock_refused_for_claimed_item(ctx, make_item):
    item = make_item()
    IndentManager(ctx).create([item.id])

    with pytest.raises(ItemStateConflict) as exc:
        InwardManager(ctx).create([{'item_id': item.id}])
    assert exc.value.current_state == ItemProcessState.IN_INDENT


def test_qc_rejection_still_lands_item_in_stock(ctx, org, make_item):
    item = make_item()
    inward = InwardManager(ctx).create([{'item_id': item.id}])
    entry = QCManager(ctx).create([inward.lines[0].id], remarks='Dimensional check')

    QCManager(ctx).reject(entry.id, remarks='Out of tolerance')

    assert entry.status == QCStatus.REJECTED
    assert entry.items[0].resolution == QCResolution.REJECTED
    line = inward.lines[0]
    assert line.is_qc_pending is False and line.is_qc_approved is False
    assert item.current_location_id == org['stores'].id
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_STOCK


def test_mixed_resolutions(ctx, make_item):
    a, b = make_item(), make_item()
    inward = InwardManager(ctx).create([{'item_id': a.id}, {'item_id': b.id}])
    entry = QCManager(ctx).create([line.id for line in inward.lines])
    by_item = {qc_item.item_id: qc_item for qc_item in entry.items}

    QCManager(ctx).resolve_item(by_item[a.id].id, QCResolution.APPROVED)
    with pytest.raises(LifecyclePolicyViolation, match='unresolved'):
        QCManager(ctx).approve(entry.id)

    QCManager(ctx).resolve_item(by_item[b.id].id, QCResolution.REJECTED, remarks='Crack on face')
    QCManager(ctx).approve(entry.id)

    approved = {line.item_id: line.is_qc_approved for line in inward.lines}
    assert approved == {a.id: True, b.id: False}
    assert ItemStateEngine.get_states([a.id, b.id]) == {
        a.id: ItemProcessState.IN_STOCK, b.id: ItemProcessState.IN_STOCK,
    }


def test_decided_entry_is_immutable(ctx, make_item):
    inward = InwardManager(ctx).create([{'item_id': make_item().id}])
    entry = _qc_all(ctx, inward)

    with pytest.raises(LifecycleTransitionError):
        QCManager(ctx).resolve_item(entry.items[0].id, QCResolution.REJECTED)
    with pytest.raises(LifecycleTransitionError):
        QCManager(ctx).reject(entry.id)


def test_invalid_resolution(ctx, make_item):
    inward = InwardManager(ctx).create([{'item_id': make_item().id}])
    entry = QCManager(ctx).create([inward.lines[0].id])

    with pytest.raises(LifecyclePolicyViolation):
        QCManager(ctx).resolve_item(entry.items[0].id, 'Maybe')


def test_line_claimed_by_one_pending_entry(ctx, org, make_item):
    inward = InwardManager(ctx).create([{'item_id': make_item().id}])
    line_id = inward.lines[0].id
    assert [row['inward_line_id'] for row in SelectionService.pending_qc_lines(org['company'].id)] == [line_id]

    QCManager(ctx).create([line_id])

    assert SelectionService.pending_qc_lines(org['company'].id) == []
    with pytest.raises(ItemStateConflict):
        QCManager(ctx).create([line_id])


def test_qc_only_at_receiving_location(ctx, plant_ctx, make_item):
    inward = InwardManager(ctx).create([{'item_id': make_item().id}])

    with pytest.raises(LifecyclePolicyViolation, match='another location'):
        QCManager(plant_ctx).create([inward.lines[0].id])


def test_qc_unknown_line(ctx):
    with pytest.raises(DocumentNotFound):
        QCManager(ctx).create([9999])


def test_qc_decision_rolls_back_as_a_whole(ctx, make_item, monkeypatch):
    a, b = make_item(), make_item()
    inward = InwardManager(ctx).create([{'item_id': a.id}, {'item_id': b.id}])
    entry = QCManager(ctx).create([line.id for line in inward.lines])
    for qc_item in entry.items:
        QCManager(ctx).resolve_item(qc_item.id, QCResolution.APPROVED)
    versions = {item.id: item.version_id for item in (a, b)}

    original = CustodyResolver.to_location
    calls = {'n': 0}

    def failing_to_location(cls, item, location_id):
        calls['n'] += 1
        if calls['n'] == 2:
            raise RuntimeError('disk full')
        original(item, location_id)

    monkeypatch.setattr(CustodyResolver, 'to_location', classmethod(failing_to_location))

    with pytest.raises(LifecycleIntegrityError):
        QCManager(ctx).approve(entry.id)

    entry = db.session.get(QCEntry, entry.id)
    assert entry.status == QCStatus.PENDING
    assert entry.decided_at is None
    lines = InwardLine.query.filter_by(inward_id=inward.id).all()
    assert all(line.is_qc_pending for line in lines)
    for item_id, version in versions.items():
        item = db.session.get(Item, item_id)
        assert item.version_id == version
        assert item.process_state == ItemProcessState.IN_QC


def test_inward_update_restores_custody(ctx, org, make_item, assert_consistent):
    a, b = make_item(), make_item()
    inward = InwardManager(ctx).create([{'item_id': a.id}])

    InwardManager(ctx).update(inward.id, lines=[{'item_id': b.id, 'remarks': 'wrong tag'}])

    assert [line.item_id for line in inward.lines] == [b.id]
    assert a.holder_type == HolderType.NOT_IN_STOCK
    assert a.current_location_id is None
    assert ItemStateEngine.get_state(a.id) == ItemProcessState.NOT_IN_STOCK
    assert ItemStateEngine.get_state(b.id) == ItemProcessState.IN_QC
    assert_consistent(a, b)


def test_inward_update_keeps_matching_lines(ctx, make_item):
    a = make_item()
    inward = InwardManager(ctx).create([{'item_id': a.id}])
    line_id = inward.lines[0].id

    InwardManager(ctx).update(inward.id, lines=[{'item_id': a.id, 'remarks': 'relabelled'}])

    assert [line.id for line in inward.lines] == [line_id]
    assert inward.lines[0].remarks == 'relabelled'


def test_inward_update_reopens_job_work(ctx, org, stocked_item, make_item, assert_consistent):
    item = stocked_item()
    other = make_item()
    job_work = JobWorkManager(ctx).create(item.id, to_party_id=org['job_worker'].id)
    inward = InwardManager(ctx).create([
        {'item_id': item.id, 'job_work_id': job_work.id},
        {'item_id': other.id},
    ])
    assert job_work.status == JobWorkStatus.COMPLETED

    InwardManager(ctx).update(inward.id, lines=[{'item_id': other.id}])

    job_work = db.session.get(JobWork, job_work.id)
    assert job_work.status == JobWorkStatus.PENDING
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_JOB_WORK
    assert item.holder_type == HolderType.LOCATION
    assert item.current_location_id == org['stores'].id
    assert_consistent(item, other)


def test_inward_update_blocked_after_qc_started(ctx, make_item):
    a, b = make_item(), make_item()
    inward = InwardManager(ctx).create([{'item_id': a.id}])
    QCManager(ctx).create([inward.lines[0].id])

    with pytest.raises(LifecyclePolicyViolation, match='QC has already started'):
        InwardManager(ctx).update(inward.id, lines=[{'item_id': b.id}])


def test_stale_item_version_is_a_retryable_conflict(stocked_item):
    from sqlalchemy import text
    from custody.buisness.lifecycle.errors import ConcurrentModificationError

    item = stocked_item()

    with pytest.raises(ConcurrentModificationError) as exc:
        with atomic('test.stale_write'):
            loaded = db.session.get(Item, item.id)
            assert loaded.current_name
            db.session.execute(text("UPDATE items SET version_id = version_id + 1 WHERE id = :id"),
                               {'id': item.id})
            loaded.current_name = 'Renamed concurrently'

    assert exc.value.retryable is True
    assert exc.value.to_dict()['retryable'] is True
    assert db.session.get(Item, item.id).current_name != 'Renamed concurrently'
