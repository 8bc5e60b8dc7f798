"""
Order eligibility and inward-progress policies
"""

from typing import Iterable, List, Optional, Set
from custody import db
from custody.buisness.lifecycle.states import IndentStatus, SourceType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation, DocumentNotFound
from custody.buisness.lifecycle.policies.item_availability import ItemAvailabilityPolicy
from custody.buisness.lifecycle.policies.indent_consumption import IndentConsumptionPolicy


class OrderEligibilityPolicy:
    """Which indent items may be placed on an order."""

    @classmethod
    def item_ids(cls, indent_item_ids: Iterable[int], company_id: int) -> List[int]:
        """Items behind the requested indent items, so callers can lock them before checking."""
        from custody.data.lifecycle.indent import Indent, IndentItem

        ids = ItemAvailabilityPolicy.check_unique(indent_item_ids, 'indent item')
        if not ids:
            return []
        rows = (db.session.query(IndentItem.item_id)
                .join(Indent, Indent.id == IndentItem.indent_id)
                .filter(IndentItem.id.in_(ids), Indent.company_id == company_id)
                .all())
        return [row.item_id for row in rows]

    @classmethod
    def check(cls, indent_item_ids: List[int], company_id: int,
              exclude_order_id: Optional[int] = None) -> list:
        """
        Validate the indent items for a new (or edited) order.

        Args:
            indent_item_ids: Requested indent items
            company_id: Caller's company
            exclude_order_id: The order being edited, if any

        Returns:
            list: The IndentItem rows, in request order

        Raises:
            LifecyclePolicyViolation: Empty, duplicated, or indent not approved
            DocumentNotFound: Unknown indent item
            ItemStateConflict: Indent item already consumed by another active order
        """
        from custody.data.lifecycle.indent import IndentItem

        ids = ItemAvailabilityPolicy.check_unique(indent_item_ids, 'indent item')
        ItemAvailabilityPolicy.check_not_empty(ids, 'indent item')

        indent_items = []
        for indent_item_id in ids:
            line = db.session.get(IndentItem, indent_item_id)
            if line is None or line.indent.company_id != company_id:
                raise DocumentNotFound('Indent item', indent_item_id)
            indent = line.indent
            if not indent.is_active or indent.status != IndentStatus.APPROVED:
                raise LifecyclePolicyViolation(
                    f"Indent item {indent_item_id} belongs to indent {indent.indent_no} "
                    f"which is {indent.status if indent.is_active else 'inactive'}; "
                    f"only approved indents can be ordered"
                )
            indent_items.append(line)

        IndentConsumptionPolicy.check_not_consumed(indent_items, "order indent item", exclude_order_id)
        return indent_items


class OrderInwardProgress:
    """What has been inwarded against an order so far."""

    @classmethod
    def inwarded_item_ids(cls, order_id: int) -> Set[int]:
        from custody.data.lifecycle.inward import Inward, InwardLine

        rows = (db.session.query(InwardLine.item_id)
                .join(Inward, Inward.id == InwardLine.inward_id)
                .filter(InwardLine.source_type == SourceType.ORDER,
                        InwardLine.source_ref_id == order_id,
                        Inward.is_active.is_(True))
                .all())
        return {row.item_id for row in rows}

    @classmethod
    def remaining_item_ids(cls, order) -> Set[int]:
        """Items derivable from the order minus those already inwarded against it."""
        return set(order.item_ids) - cls.inwarded_item_ids(order.id)

    @classmethod
    def is_fully_inwarded(cls, order) -> bool:
        return not cls.remaining_item_ids(order)

    @classmethod
    def check_nothing_inwarded(cls, order, action: str) -> None:
        if cls.inwarded_item_ids(order.id):
            raise LifecyclePolicyViolation(
                f"Cannot {action} order {order.order_no}: items have already been inwarded against it"
            )
