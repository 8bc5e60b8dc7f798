"""
OrderManager - purchase orders over approved indent items
"""

from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Dict, Any
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.state_machine import OrderStateMachine
from custody.buisness.lifecycle.states import OrderStatus
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import OrderEligibilityPolicy, OrderInwardProgress
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.order")


class OrderManager(LifecycleManager):
    """
    Domain service for purchase orders.

    An order consumes indent items; approval is a pure status change.
    Editing and deactivation are allowed only before anything is inwarded.
    """

    DOCUMENT_KIND = 'order'

    def create(self, vendor_id: int, lines: List[Dict[str, Any]],
               delivery_date: Optional[date] = None, quotation_no: Optional[str] = None,
               remarks: Optional[str] = None):
        """
        Create a Pending order.

        Args:
            vendor_id: Supplying party
            lines: [{"indent_item_id": int, "rate": number?}, ...]
            delivery_date: Expected delivery
            quotation_no: Vendor quotation reference
            remarks: Free text

        Returns:
            Order: The new order

        Raises:
            LifecyclePolicyViolation: No lines, duplicates, indent not approved
            ItemStateConflict: Indent item already on another active order
        """
        from custody.data.lifecycle.order import Order, OrderItem

        with atomic('order.create'):
            self._party(vendor_id)
            rates = self._parse_lines(lines)
            items = self._lock_items(OrderEligibilityPolicy.item_ids(rates.keys(), self.ctx.company_id))
            indent_items = OrderEligibilityPolicy.check(list(rates.keys()), self.ctx.company_id)

            order = Order(
                order_no=self._next_code(self.ctx.location_id),
                company_id=self.ctx.company_id,
                location_id=self.ctx.location_id,
                vendor_id=vendor_id,
                delivery_date=delivery_date,
                quotation_no=quotation_no,
                remarks=remarks,
                status=OrderStatus.PENDING,
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            for indent_item in indent_items:
                order.items.append(OrderItem(indent_item_id=indent_item.id,
                                             rate=rates[indent_item.id],
                                             created_by_id=self.ctx.actor_id))
            db.session.add(order)

            self._sync(items)
            logger.info(f"Order {order.order_no} created with {len(indent_items)} line(s)")
        return order

    def update(self, order_id: int, lines: Optional[List[Dict[str, Any]]] = None,
               vendor_id: Optional[int] = None, delivery_date: Optional[date] = None,
               quotation_no: Optional[str] = None, remarks: Optional[str] = None):
        """Edit a Pending order. Passing lines replaces the indent items it consumes."""
        from custody.data.lifecycle.order import Order, OrderItem

        with atomic('order.update'):
            order = self._get(Order, order_id, 'Order')
            self._check_editable(order)

            if vendor_id is not None:
                self._party(vendor_id)
                order.vendor_id = vendor_id
            if delivery_date is not None:
                order.delivery_date = delivery_date
            if quotation_no is not None:
                order.quotation_no = quotation_no
            if remarks is not None:
                order.remarks = remarks

            touched = []
            if lines is not None:
                rates = self._parse_lines(lines)
                touched = self._lock_items(
                    order.item_ids + OrderEligibilityPolicy.item_ids(rates.keys(), self.ctx.company_id))
                indent_items = OrderEligibilityPolicy.check(
                    list(rates.keys()), self.ctx.company_id, exclude_order_id=order.id)

                current = {line.indent_item_id: line for line in order.items}
                for indent_item_id, line in current.items():
                    if indent_item_id not in rates:
                        order.items.remove(line)
                for indent_item in indent_items:
                    if indent_item.id in current:
                        current[indent_item.id].rate = rates[indent_item.id]
                    else:
                        order.items.append(OrderItem(indent_item_id=indent_item.id,
                                                     rate=rates[indent_item.id],
                                                     created_by_id=self.ctx.actor_id))

            order.touch(self.ctx.actor_id)
            self._sync(touched)
            logger.info(f"Order {order.order_no} updated")
        return order

    def approve(self, order_id: int):
        """Pending -> Approved."""
        from custody.data.lifecycle.order import Order

        with atomic('order.approve'):
            order = self._get(Order, order_id, 'Order')
            if not order.is_active:
                raise LifecyclePolicyViolation(f"Order {order.order_no} is inactive")
            OrderStateMachine.validate_transition(order.status, OrderStatus.APPROVED)
            order.status = OrderStatus.APPROVED
            order.approved_by_id = self.ctx.actor_id
            order.approved_at = datetime.utcnow()
            order.touch(self.ctx.actor_id)
            logger.info(f"Order {order.order_no} approved")
        return order

    def deactivate(self, order_id: int):
        """Soft-deactivate an order with nothing inwarded; its indent items are released."""
        from custody.data.lifecycle.order import Order

        with atomic('order.deactivate'):
            order = self._get(Order, order_id, 'Order')
            if not order.is_active:
                raise LifecyclePolicyViolation(f"Order {order.order_no} is already inactive")
            OrderInwardProgress.check_nothing_inwarded(order, 'deactivate')
            items = self._lock_items(order.item_ids)
            order.is_active = False
            order.touch(self.ctx.actor_id)
            self._sync(items)
            logger.info(f"Order {order.order_no} deactivated")
        return order

    @staticmethod
    def _check_editable(order) -> None:
        if not order.is_active:
            raise LifecyclePolicyViolation(f"Order {order.order_no} is inactive")
        if not order.is_pending:
            raise LifecyclePolicyViolation(
                f"Order {order.order_no} is {order.status}; only Pending orders can be edited"
            )
        OrderInwardProgress.check_nothing_inwarded(order, 'edit')

    @staticmethod
    def _parse_lines(lines: List[Dict[str, Any]]) -> Dict[int, Optional[Decimal]]:
        """Map indent_item_id -> rate, keeping request order and rejecting duplicates."""
        if not lines:
            raise LifecyclePolicyViolation("At least one indent item is required")
        rates: Dict[int, Optional[Decimal]] = {}
        for line in lines:
            try:
                indent_item_id = int(line['indent_item_id'])
            except (KeyError, TypeError, ValueError):
                raise LifecyclePolicyViolation("Each order line needs an integer indent_item_id")
            if indent_item_id in rates:
                raise LifecyclePolicyViolation(f"Duplicate indent item ids in request: {indent_item_id}")
            rate = line.get('rate')
            if rate is not None:
                try:
                    rate = Decimal(str(rate))
                except InvalidOperation:
                    raise LifecyclePolicyViolation(f"Invalid rate for indent item {indent_item_id}")
                if not rate.is_finite():
                    raise LifecyclePolicyViolation(f"Rate for indent item {indent_item_id} must be a finite number")
                if rate < 0:
                    raise LifecyclePolicyViolation(f"Rate for indent item {indent_item_id} cannot be negative")
            rates[indent_item_id] = rate
        return rates
