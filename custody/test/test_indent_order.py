"""
Indent and order workflows: item claims, approval gates and the
consumption link between indent items and orders.
"""
import pytest
from custody import db
from custody.buisness.lifecycle.managers import IndentManager, OrderManager, InwardManager
from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import ItemProcessState, IndentStatus, OrderStatus
from custody.buisness.lifecycle.errors import (
    ItemStateConflict, LifecyclePolicyViolation, LifecycleTransitionError,
)
from custody.services.lifecycle.selection_service import SelectionService


def _state(item):
    return ItemStateEngine.get_state(item.id)


def test_indent_claims_items(ctx, make_item):
    a, b = make_item(), make_item()

    indent = IndentManager(ctx).create([a.id, b.id], remarks='Replacement dies')

    assert indent.status == IndentStatus.PENDING
    assert sorted(indent.item_ids) == sorted([a.id, b.id])
    assert _state(a) == ItemProcessState.IN_INDENT
    assert a.process_state == ItemProcessState.IN_INDENT
    assert ItemStateEngine.can_add_to_indent(a.id) is False
    assert ItemStateEngine.can_add_to_indent(a.id, exclude_indent_id=indent.id) is True


def test_item_cannot_join_two_indents(ctx, make_item):
    item = make_item()
    IndentManager(ctx).create([item.id])

    with pytest.raises(ItemStateConflict) as exc:
        IndentManager(ctx).create([item.id])

    assert exc.value.item_id == item.id
    assert exc.value.current_state == ItemProcessState.IN_INDENT


def test_indent_rejects_in_stock_item(ctx, stocked_item):
    item = stocked_item()

    with pytest.raises(ItemStateConflict) as exc:
        IndentManager(ctx).create([item.id])

    assert exc.value.current_state == ItemProcessState.IN_STOCK


def test_indent_input_validation(ctx, make_item):
    item = make_item()

    with pytest.raises(LifecyclePolicyViolation):
        IndentManager(ctx).create([])
    with pytest.raises(LifecyclePolicyViolation):
        IndentManager(ctx).create([item.id, item.id])
    with pytest.raises(LifecyclePolicyViolation):
        IndentManager(ctx).create([item.id], indent_type='Urgent')


def test_update_replaces_item_set(ctx, make_item):
    a, b, c = make_item(), make_item(), make_item()
    indent = IndentManager(ctx).create([a.id, b.id])

    IndentManager(ctx).update(indent.id, item_ids=[b.id, c.id], remarks='swap a for c')

    assert sorted(indent.item_ids) == sorted([b.id, c.id])
    assert _state(a) == ItemProcessState.NOT_IN_STOCK
    assert a.process_state == ItemProcessState.NOT_IN_STOCK
    assert _state(c) == ItemProcessState.IN_INDENT
    assert indent.remarks == 'swap a for c'


def test_update_cannot_take_item_from_other_indent(ctx, make_item):
    a, b = make_item(), make_item()
    first = IndentManager(ctx).create([a.id])
    IndentManager(ctx).create([b.id])

    with pytest.raises(ItemStateConflict):
        IndentManager(ctx).update(first.id, item_ids=[a.id, b.id])

    assert first.item_ids == [a.id]


def test_only_pending_indent_is_editable(ctx, make_item):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])
    IndentManager(ctx).approve(indent.id)

    with pytest.raises(LifecyclePolicyViolation):
        IndentManager(ctx).update(indent.id, remarks='too late')


def test_reject_releases_items(ctx, make_item):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])

    IndentManager(ctx).reject(indent.id, remarks='Not needed')

    assert indent.status == IndentStatus.REJECTED
    assert _state(item) == ItemProcessState.NOT_IN_STOCK
    assert item.process_state == ItemProcessState.NOT_IN_STOCK
    # The released item can be indented again
    IndentManager(ctx).create([item.id])
    assert _state(item) == ItemProcessState.IN_INDENT


def test_rejected_indent_is_terminal(ctx, make_item):
    indent = IndentManager(ctx).create([make_item().id])
    IndentManager(ctx).reject(indent.id)

    with pytest.raises(LifecycleTransitionError):
        IndentManager(ctx).approve(indent.id)
    with pytest.raises(LifecycleTransitionError):
        IndentManager(ctx).revert(indent.id)


def test_order_requires_approved_indent(ctx, org, make_item):
    indent = IndentManager(ctx).create([make_item().id])

    with pytest.raises(LifecyclePolicyViolation):
        OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id}])


def test_order_consumes_indent_items(ctx, org, make_item):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])
    IndentManager(ctx).approve(indent.id)
    assert [row['item_id'] for row in SelectionService.pending_indent_items(org['company'].id)] == [item.id]

    order = OrderManager(ctx).create(org['vendor'].id,
                                     [{'indent_item_id': indent.items[0].id, 'rate': '125.50'}],
                                     quotation_no='Q-881')

    assert order.status == OrderStatus.PENDING
    assert order.item_ids == [item.id]
    assert str(order.items[0].rate) == '125.50'
    assert _state(item) == ItemProcessState.IN_ORDER
    assert item.process_state == ItemProcessState.IN_ORDER
    assert SelectionService.pending_indent_items(org['company'].id) == []

    with pytest.raises(ItemStateConflict):
        OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id}])


def test_order_rejects_negative_rate(ctx, org, make_item):
    indent = IndentManager(ctx).create([make_item().id])
    IndentManager(ctx).approve(indent.id)

    with pytest.raises(LifecyclePolicyViolation):
        OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id, 'rate': -1}])


@pytest.mark.parametrize('rate', ['NaN', 'Infinity', '-Infinity', 'ten'])
def test_order_rejects_non_finite_rate(ctx, org, make_item, rate):
    indent = IndentManager(ctx).create([make_item().id])
    IndentManager(ctx).approve(indent.id)

    with pytest.raises(LifecyclePolicyViolation):
        OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id, 'rate': rate}])


def test_revert_blocked_while_items_are_ordered(ctx, org, make_item):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])
    IndentManager(ctx).approve(indent.id)
    order = OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id}])

    with pytest.raises(ItemStateConflict) as exc:
        IndentManager(ctx).revert(indent.id)
    assert exc.value.current_state == ItemProcessState.IN_ORDER
    assert db.session.get(type(indent), indent.id).status == IndentStatus.APPROVED

    OrderManager(ctx).deactivate(order.id)
    assert _state(item) == ItemProcessState.IN_INDENT
    assert item.process_state == ItemProcessState.IN_INDENT

    IndentManager(ctx).revert(indent.id)
    assert indent.status == IndentStatus.PENDING
    assert indent.approved_by_id is None


def test_order_update_swaps_indent_items(ctx, org, make_item):
    a, b = make_item(), make_item()
    indent = IndentManager(ctx).create([a.id, b.id])
    IndentManager(ctx).approve(indent.id)
    line_a, line_b = sorted(indent.items, key=lambda line: line.item_id)
    order = OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': line_a.id}])

    OrderManager(ctx).update(order.id, lines=[{'indent_item_id': line_b.id, 'rate': 10}])

    assert order.item_ids == [b.id]
    assert _state(a) == ItemProcessState.IN_INDENT
    assert _state(b) == ItemProcessState.IN_ORDER


def test_order_frozen_once_inwarded(ctx, org, make_item):
    item = make_item()
    indent = IndentManager(ctx).create([item.id])
    IndentManager(ctx).approve(indent.id)
    order = OrderManager(ctx).create(org['vendor'].id, [{'indent_item_id': indent.items[0].id}])
    OrderManager(ctx).approve(order.id)
    InwardManager(ctx).create([{'item_id': item.id, 'order_id': order.id}])

    with pytest.raises(LifecyclePolicyViolation):
        OrderManager(ctx).deactivate(order.id)
    with pytest.raises(LifecycleTransitionError):
        OrderManager(ctx).approve(order.id)
