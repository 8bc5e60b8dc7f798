"""
IndentManager - orchestrates purchase indent workflow

create / update / approve / reject / revert. Every public method is one
transaction.
"""

from datetime import datetime
from typing import List, Optional
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.state_machine import IndentStateMachine
from custody.buisness.lifecycle.states import IndentStatus, IndentType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import (
    ItemAvailabilityPolicy, IndentConsumptionPolicy, IndentEditPolicy,
)
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.indent")


class IndentManager(LifecycleManager):
    """
    Domain service for purchase indents.

    Responsibilities:
    - Only NotInStock items may join an indent
    - Status moves through IndentStateMachine
    - Rejection releases the items; revert is blocked once items are ordered
    """

    DOCUMENT_KIND = 'indent'

    def create(self, item_ids: List[int], indent_type: str = IndentType.NEW,
               remarks: Optional[str] = None):
        """
        Create a Pending indent for a set of items.

        Args:
            item_ids: Items to request
            indent_type: New / Repair / Correction / Modification
            remarks: Free text

        Returns:
            Indent: The new indent

        Raises:
            LifecyclePolicyViolation: Empty / duplicate item list, bad indent type
            ItemStateConflict: An item is not NotInStock
        """
        from custody.data.lifecycle.indent import Indent, IndentItem

        with atomic('indent.create'):
            self._check_type(indent_type)
            ids = ItemAvailabilityPolicy.check_unique(item_ids)
            ItemAvailabilityPolicy.check_not_empty(ids, 'item')

            items = self._lock_items(ids)
            for item in items:
                ItemAvailabilityPolicy.check_can_add_to_indent(item.id)

            indent = Indent(
                indent_no=self._next_code(self.ctx.location_id),
                indent_type=indent_type,
                company_id=self.ctx.company_id,
                location_id=self.ctx.location_id,
                remarks=remarks,
                status=IndentStatus.PENDING,
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            for item in items:
                indent.items.append(IndentItem(item_id=item.id, created_by_id=self.ctx.actor_id))
            db.session.add(indent)

            self._sync(items)
            logger.info(f"Indent {indent.indent_no} created with {len(items)} item(s)")
        return indent

    def update(self, indent_id: int, item_ids: Optional[List[int]] = None,
               indent_type: Optional[str] = None, remarks: Optional[str] = None):
        """
        Edit a Pending indent. Passing item_ids replaces the item set.

        Raises:
            LifecyclePolicyViolation: Indent not Pending, bad input
            ItemStateConflict: Added item not NotInStock, or removed item already ordered
        """
        from custody.data.lifecycle.indent import Indent, IndentItem

        with atomic('indent.update'):
            indent = self._get(Indent, indent_id, 'Indent')
            IndentEditPolicy.check_editable(indent)

            if indent_type is not None:
                self._check_type(indent_type)
                indent.indent_type = indent_type
            if remarks is not None:
                indent.remarks = remarks

            touched = []
            if item_ids is not None:
                ids = ItemAvailabilityPolicy.check_unique(item_ids)
                ItemAvailabilityPolicy.check_not_empty(ids, 'item')

                current = {line.item_id: line for line in indent.items}
                removed = [line for item_id, line in current.items() if item_id not in ids]
                added = [item_id for item_id in ids if item_id not in current]

                IndentConsumptionPolicy.check_not_consumed(removed, "remove indent item")

                touched = self._lock_items([line.item_id for line in removed] + added)
                for item_id in added:
                    ItemAvailabilityPolicy.check_can_add_to_indent(item_id, exclude_indent_id=indent.id)

                for line in removed:
                    indent.items.remove(line)
                for item_id in added:
                    indent.items.append(IndentItem(item_id=item_id, created_by_id=self.ctx.actor_id))

            indent.touch(self.ctx.actor_id)
            self._sync(touched)
            logger.info(f"Indent {indent.indent_no} updated")
        return indent

    def approve(self, indent_id: int):
        """Pending -> Approved. Custody and item states are untouched."""
        from custody.data.lifecycle.indent import Indent

        with atomic('indent.approve'):
            indent = self._get(Indent, indent_id, 'Indent')
            self._check_active(indent)
            IndentStateMachine.validate_transition(indent.status, IndentStatus.APPROVED)
            indent.status = IndentStatus.APPROVED
            indent.approved_by_id = self.ctx.actor_id
            indent.approved_at = datetime.utcnow()
            indent.touch(self.ctx.actor_id)
            logger.info(f"Indent {indent.indent_no} approved")
        return indent

    def reject(self, indent_id: int, remarks: Optional[str] = None):
        """Pending -> Rejected; the indent's items become free again."""
        from custody.data.lifecycle.indent import Indent

        with atomic('indent.reject'):
            indent = self._get(Indent, indent_id, 'Indent')
            self._check_active(indent)
            IndentStateMachine.validate_transition(indent.status, IndentStatus.REJECTED)
            items = self._lock_items(indent.item_ids)
            indent.status = IndentStatus.REJECTED
            if remarks:
                indent.remarks = remarks
            indent.touch(self.ctx.actor_id)
            self._sync(items)
            logger.info(f"Indent {indent.indent_no} rejected")
        return indent

    def revert(self, indent_id: int):
        """
        Approved -> Pending, allowed only while no item of the indent is on
        an active order.
        """
        from custody.data.lifecycle.indent import Indent

        with atomic('indent.revert'):
            indent = self._get(Indent, indent_id, 'Indent')
            self._check_active(indent)
            IndentStateMachine.validate_transition(indent.status, IndentStatus.PENDING)
            IndentConsumptionPolicy.check_not_consumed(indent.items, f"revert indent {indent.indent_no}")
            indent.status = IndentStatus.PENDING
            indent.approved_by_id = None
            indent.approved_at = None
            indent.touch(self.ctx.actor_id)
            logger.info(f"Indent {indent.indent_no} reverted to Pending")
        return indent

    @staticmethod
    def _check_type(indent_type: str) -> None:
        if indent_type not in IndentType.ALL:
            raise LifecyclePolicyViolation(
                f"Indent type must be one of: {', '.join(IndentType.ALL)}"
            )

    @staticmethod
    def _check_active(indent) -> None:
        if not indent.is_active:
            raise LifecyclePolicyViolation(f"Indent {indent.indent_no} is inactive")
