"""custody.services.lifecycle.selection_service

Selection lists for the workflow screens:
- indent items available for ordering
- inward lines awaiting QC (optionally only those not yet in a pending entry)
- returning movements awaiting QC
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import exists, and_

from custody import db
from custody.buisness.lifecycle.states import IndentStatus, MovementType, QCStatus
from custody.data.lifecycle.indent import Indent, IndentItem
from custody.data.lifecycle.order import Order, OrderItem
from custody.data.lifecycle.inward import Inward, InwardLine
from custody.data.lifecycle.quality_control import QCEntry, QCItem
from custody.data.lifecycle.movement import Movement
from custody.data.core.item import Item


class SelectionService:

    @staticmethod
    def pending_indent_items(company_id: int) -> List[Dict[str, Any]]:
        """Approved, active indent items not consumed by an active order."""
        consumed = exists().where(and_(
            OrderItem.indent_item_id == IndentItem.id,
            Order.id == OrderItem.order_id,
            Order.is_active.is_(True),
        ))
        rows = (db.session.query(IndentItem, Indent, Item)
                .join(Indent, Indent.id == IndentItem.indent_id)
                .join(Item, Item.id == IndentItem.item_id)
                .filter(Indent.company_id == company_id,
                        Indent.is_active.is_(True),
                        Indent.status == IndentStatus.APPROVED,
                        ~consumed)
                .order_by(Indent.id, IndentItem.id)
                .all())
        return [{
            'indent_item_id': row.IndentItem.id,
            'indent_id': row.Indent.id,
            'indent_no': row.Indent.indent_no,
            'indent_type': row.Indent.indent_type,
            'item_id': row.Item.id,
            'item_name': row.Item.current_name,
        } for row in rows]

    @staticmethod
    def pending_qc_lines(company_id: int, location_id: Optional[int] = None,
                         unclaimed_only: bool = True) -> List[Dict[str, Any]]:
        """Active inward lines still awaiting QC."""
        in_pending_entry = exists().where(and_(
            QCItem.inward_line_id == InwardLine.id,
            QCEntry.id == QCItem.qc_entry_id,
            QCEntry.status == QCStatus.PENDING,
        ))
        query = (db.session.query(InwardLine, Inward, Item)
                 .join(Inward, Inward.id == InwardLine.inward_id)
                 .join(Item, Item.id == InwardLine.item_id)
                 .filter(Inward.company_id == company_id,
                         Inward.is_active.is_(True),
                         InwardLine.is_qc_pending.is_(True)))
        if location_id is not None:
            query = query.filter(Inward.location_id == location_id)
        if unclaimed_only:
            query = query.filter(~in_pending_entry)
        rows = query.order_by(Inward.id, InwardLine.id).all()
        return [{
            'inward_line_id': row.InwardLine.id,
            'inward_id': row.Inward.id,
            'inward_no': row.Inward.inward_no,
            'location_id': row.Inward.location_id,
            'source_type': row.InwardLine.source_type,
            'source_ref_id': row.InwardLine.source_ref_id,
            'item_id': row.Item.id,
            'item_name': row.Item.current_name,
        } for row in rows]

    @staticmethod
    def pending_qc_movements(company_id: int, location_id: Optional[int] = None) -> List[Dict[str, Any]]:
        query = Movement.query.filter(
            Movement.company_id == company_id,
            Movement.movement_type.in_(MovementType.RETURNING),
            Movement.is_qc_pending.is_(True),
        )
        if location_id is not None:
            query = query.filter(Movement.to_location_id == location_id)
        return [movement.to_dict() for movement in query.order_by(Movement.id).all()]
