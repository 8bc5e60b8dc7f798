"""
Ad-hoc movements: issue to a party, receive / system return with QC.
"""
import pytest
from custody.buisness.lifecycle.managers import MovementManager, OutwardManager, InwardManager
from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import ItemProcessState, HolderType, MovementType
from custody.buisness.lifecycle.errors import (
    LifecyclePolicyViolation, LifecycleTransitionError, ItemStateConflict,
)
from custody.services.lifecycle.selection_service import SelectionService


def test_issue_then_receive_with_qc(ctx, org, stocked_item, assert_consistent):
    item = stocked_item()

    issue = MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)
    assert issue.is_qc_pending is False
    assert issue.from_location_id == org['stores'].id
    assert item.holder_type == HolderType.VENDOR
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.OUTWARD
    assert_consistent(item)

    receive = MovementManager(ctx).create(MovementType.RECEIVE, item.id, remarks='Back from trial')
    assert receive.is_qc_pending is True
    assert receive.to_location_id == org['stores'].id
    assert receive.outward_id is None
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_QC
    pending = SelectionService.pending_qc_movements(org['company'].id, org['stores'].id)
    assert [row['id'] for row in pending] == [receive.id]
    assert_consistent(item)

    MovementManager(ctx).resolve_qc(receive.id, approved=True, remarks='OK')
    assert receive.is_qc_approved is True
    assert receive.qc_by_id == org['admin'].id
    assert item.holder_type == HolderType.LOCATION
    assert item.current_location_id == org['stores'].id
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_STOCK
    assert SelectionService.pending_qc_movements(org['company'].id) == []
    assert_consistent(item)

    with pytest.raises(LifecycleTransitionError):
        MovementManager(ctx).resolve_qc(receive.id, approved=False)


def test_rejected_return_still_lands_at_location(ctx, org, stocked_item):
    item = stocked_item()
    MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)
    ret = MovementManager(ctx).create(MovementType.SYSTEM_RETURN, item.id, reason='Stock audit')

    MovementManager(ctx).resolve_qc(ret.id, approved=False, remarks='Damaged')

    assert ret.is_qc_approved is False
    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_STOCK


def test_return_closes_outward(ctx, org, stocked_item):
    item = stocked_item()
    outward = OutwardManager(ctx).create(org['vendor'].id, [{'item_id': item.id}])

    receive = MovementManager(ctx).create(MovementType.RECEIVE, item.id)
    assert receive.outward_id == outward.id
    MovementManager(ctx).resolve_qc(receive.id, approved=True)

    assert ItemStateEngine.get_state(item.id) == ItemProcessState.IN_STOCK
    with pytest.raises(LifecyclePolicyViolation, match='already been returned'):
        InwardManager(ctx).create([{'item_id': item.id, 'outward_id': outward.id}])


def test_system_return_needs_reason(ctx, org, stocked_item):
    item = stocked_item()
    MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)

    with pytest.raises(LifecyclePolicyViolation, match='reason'):
        MovementManager(ctx).create(MovementType.SYSTEM_RETURN, item.id, reason='  ')


def test_issue_rules(ctx, plant_ctx, org, stocked_item, make_item):
    item = stocked_item()

    with pytest.raises(LifecyclePolicyViolation, match='must go to a party'):
        MovementManager(ctx).create(MovementType.ISSUE, item.id)
    with pytest.raises(LifecyclePolicyViolation, match='must go to a party'):
        MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id,
                                    to_location_id=org['plant'].id)
    with pytest.raises(LifecyclePolicyViolation, match='not held by location'):
        MovementManager(plant_ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)
    with pytest.raises(LifecyclePolicyViolation):
        MovementManager(ctx).create(MovementType.ISSUE, make_item().id, to_party_id=org['vendor'].id)
    with pytest.raises(LifecyclePolicyViolation, match='Unknown movement type'):
        MovementManager(ctx).create('Teleport', item.id)


def test_party_to_party_is_refused(ctx, org, stocked_item):
    item = stocked_item()
    MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)

    with pytest.raises(LifecyclePolicyViolation):
        MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['job_worker'].id)
    with pytest.raises(LifecyclePolicyViolation, match='Party-to-party'):
        MovementManager(ctx).create(MovementType.RECEIVE, item.id, to_party_id=org['job_worker'].id)


def test_receive_requires_item_with_party(ctx, stocked_item):
    item = stocked_item()

    with pytest.raises(LifecyclePolicyViolation, match='not held by a party'):
        MovementManager(ctx).create(MovementType.RECEIVE, item.id)


def test_second_receive_while_qc_pending(ctx, org, stocked_item):
    item = stocked_item()
    MovementManager(ctx).create(MovementType.ISSUE, item.id, to_party_id=org['vendor'].id)
    MovementManager(ctx).create(MovementType.RECEIVE, item.id)

    with pytest.raises(ItemStateConflict) as exc:
        MovementManager(ctx).create(MovementType.RECEIVE, item.id)
    assert exc.value.current_state == ItemProcessState.IN_QC
