"""
Indent Consumption Policy

An indent item is "consumed" while an active order references it. Consumed
indent items cannot be removed from their indent, reverted, or ordered twice.
"""

from typing import Iterable, Optional, Set
from custody import db
from custody.buisness.lifecycle.states import ItemProcessState
from custody.buisness.lifecycle.errors import ItemStateConflict, LifecyclePolicyViolation


class IndentConsumptionPolicy:

    @classmethod
    def find_consumed(cls, indent_item_ids: Iterable[int], exclude_order_id: Optional[int] = None) -> Set[int]:
        """
        Return the subset of indent item ids referenced by an active order.

        Args:
            indent_item_ids: Indent items to probe
            exclude_order_id: Order to ignore (used while editing that order)
        """
        from custody.data.lifecycle.order import Order, OrderItem

        ids = list(indent_item_ids)
        if not ids:
            return set()

        query = (db.session.query(OrderItem.indent_item_id)
                 .join(Order, Order.id == OrderItem.order_id)
                 .filter(OrderItem.indent_item_id.in_(ids), Order.is_active.is_(True)))
        if exclude_order_id is not None:
            query = query.filter(Order.id != exclude_order_id)
        return {row.indent_item_id for row in query.all()}

    @classmethod
    def check_not_consumed(cls, indent_items, action: str, exclude_order_id: Optional[int] = None) -> None:
        """
        Raise if any of the given IndentItem rows is consumed by an active order.

        Raises:
            ItemStateConflict: Naming the first consumed item
        """
        by_id = {line.id: line for line in indent_items}
        consumed = cls.find_consumed(by_id.keys(), exclude_order_id)
        if consumed:
            first = by_id[min(consumed)]
            raise ItemStateConflict(
                first.item_id,
                ItemProcessState.IN_ORDER,
                f"Cannot {action}: item {first.item_id} (indent item {first.id}) "
                f"is already on an active order",
            )


class IndentEditPolicy:
    """Only Pending indents may be edited."""

    @classmethod
    def check_editable(cls, indent) -> None:
        if not indent.is_active:
            raise LifecyclePolicyViolation(f"Indent {indent.indent_no} is inactive")
        if not indent.is_pending:
            raise LifecyclePolicyViolation(
                f"Indent {indent.indent_no} is {indent.status}; only Pending indents can be edited"
            )
