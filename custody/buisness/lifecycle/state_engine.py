"""
Item state derivation engine

Computes an item's canonical process state from the document tables. The
document rows are the source of truth; Item.process_state is only a cache
that sync() rewrites after every lifecycle write.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict
from sqlalchemy import exists, and_
from custody import db
from custody.buisness.lifecycle.states import (
    ItemProcessState, HolderType, IndentStatus, OrderStatus, JobWorkStatus,
    MovementType, SourceType,
)
from custody.buisness.lifecycle.errors import DocumentNotFound
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.state_engine")


@dataclass(frozen=True)
class StateClaim:
    """The document currently claiming an item (None doc fields for holder fallbacks)."""
    state: str
    doc_type: Optional[str] = None
    doc_id: Optional[int] = None
    doc_no: Optional[str] = None

    def describe(self) -> str:
        label = ItemProcessState.describe(self.state)
        if self.doc_no:
            return f"{label} ({self.doc_type} {self.doc_no})"
        return label


@dataclass(frozen=True)
class StateDrift:
    item_id: int
    cached: str
    derived: str


class ItemStateEngine:
    """
    Derives process state by probing claims in a fixed priority order:

        InQC > InJobWork > Outward > InOrder > InIndent > holder fallback

    All methods are reads except sync().
    """

    HOLDER_FALLBACK: Dict[str, str] = {
        HolderType.LOCATION: ItemProcessState.IN_STOCK,
        HolderType.VENDOR: ItemProcessState.OUTWARD,
        HolderType.NOT_IN_STOCK: ItemProcessState.NOT_IN_STOCK,
    }

    @classmethod
    def get_state(cls, item_id: int, exclude_indent_id: Optional[int] = None) -> str:
        return cls.find_claim(item_id, exclude_indent_id).state

    @classmethod
    def find_claim(cls, item_id: int, exclude_indent_id: Optional[int] = None) -> StateClaim:
        """
        Find the highest-priority claim on an item.

        Args:
            item_id: Item to probe
            exclude_indent_id: Indent whose own lines are ignored (used while
                editing that indent)

        Returns:
            StateClaim: State plus the claiming document, if any

        Raises:
            DocumentNotFound: If the item does not exist
        """
        from custody.data.core.item import Item

        item = db.session.get(Item, item_id)
        if item is None:
            raise DocumentNotFound('Item', item_id)

        for probe in (cls._probe_qc, cls._probe_job_work, cls._probe_outward, cls._probe_order):
            claim = probe(item_id)
            if claim is not None:
                return claim

        claim = cls._probe_indent(item_id, exclude_indent_id)
        if claim is not None:
            return claim

        return StateClaim(cls.HOLDER_FALLBACK.get(item.holder_type, ItemProcessState.NOT_IN_STOCK))

    @classmethod
    def get_states(cls, item_ids: List[int]) -> Dict[int, str]:
        return {item_id: cls.get_state(item_id) for item_id in item_ids}

    @classmethod
    def is_in_stock(cls, item_id: int) -> bool:
        return cls.get_state(item_id) == ItemProcessState.IN_STOCK

    @classmethod
    def can_add_to_indent(cls, item_id: int, exclude_indent_id: Optional[int] = None) -> bool:
        return cls.get_state(item_id, exclude_indent_id) == ItemProcessState.NOT_IN_STOCK

    @staticmethod
    def describe(state: str) -> str:
        return ItemProcessState.describe(state)

    # ------------------------------------------------------------------
    # Cache maintenance
    # ------------------------------------------------------------------

    @classmethod
    def sync(cls, item) -> str:
        """
        Rewrite the item's cached process_state from the documents.

        Always touches the row so the optimistic version column is bumped,
        even when the state itself did not change.
        """
        derived = cls.get_state(item.id)
        if item.process_state != derived:
            logger.debug(f"Item {item.id} state {item.process_state} -> {derived}")
        item.process_state = derived
        item.updated_at = datetime.utcnow()
        return derived

    @classmethod
    def check(cls, item) -> Optional[StateDrift]:
        """Return the drift between cached and derived state, or None when they agree."""
        derived = cls.get_state(item.id)
        if item.process_state != derived:
            return StateDrift(item.id, item.process_state, derived)
        return None

    # ------------------------------------------------------------------
    # Probes
    # ------------------------------------------------------------------

    @staticmethod
    def _probe_qc(item_id: int) -> Optional[StateClaim]:
        from custody.data.lifecycle.inward import Inward, InwardLine
        from custody.data.lifecycle.movement import Movement

        row = (db.session.query(InwardLine, Inward)
               .join(Inward, Inward.id == InwardLine.inward_id)
               .filter(InwardLine.item_id == item_id,
                       InwardLine.is_qc_pending.is_(True),
                       Inward.is_active.is_(True))
               .order_by(InwardLine.id.desc())
               .first())
        if row is not None:
            return StateClaim(ItemProcessState.IN_QC, 'Inward', row.Inward.id, row.Inward.inward_no)

        movement = (Movement.query
                    .filter(Movement.item_id == item_id,
                            Movement.movement_type.in_(MovementType.RETURNING),
                            Movement.is_qc_pending.is_(True))
                    .order_by(Movement.id.desc())
                    .first())
        if movement is not None:
            return StateClaim(ItemProcessState.IN_QC, 'Movement', movement.id, movement.movement_no)
        return None

    @staticmethod
    def _probe_job_work(item_id: int) -> Optional[StateClaim]:
        from custody.data.lifecycle.job_work import JobWork

        job_work = (JobWork.query
                    .filter(JobWork.item_id == item_id, JobWork.status == JobWorkStatus.PENDING)
                    .order_by(JobWork.id.desc())
                    .first())
        if job_work is not None:
            return StateClaim(ItemProcessState.IN_JOB_WORK, 'JobWork', job_work.id, job_work.job_work_no)
        return None

    @staticmethod
    def _probe_outward(item_id: int) -> Optional[StateClaim]:
        from custody.data.lifecycle.outward import Outward, OutwardLine
        from custody.data.lifecycle.inward import Inward, InwardLine
        from custody.data.lifecycle.movement import Movement

        closed_by_inward = exists().where(and_(
            InwardLine.item_id == OutwardLine.item_id,
            InwardLine.source_type == SourceType.OUTWARD_RETURN,
            InwardLine.source_ref_id == OutwardLine.outward_id,
            Inward.id == InwardLine.inward_id,
            Inward.is_active.is_(True),
        ))
        closed_by_movement = exists().where(and_(
            Movement.item_id == OutwardLine.item_id,
            Movement.outward_id == OutwardLine.outward_id,
            Movement.movement_type.in_(MovementType.RETURNING),
        ))

        row = (db.session.query(OutwardLine, Outward)
               .join(Outward, Outward.id == OutwardLine.outward_id)
               .filter(OutwardLine.item_id == item_id,
                       Outward.is_active.is_(True),
                       ~closed_by_inward,
                       ~closed_by_movement)
               .order_by(Outward.id.desc())
               .first())
        if row is not None:
            return StateClaim(ItemProcessState.OUTWARD, 'Outward', row.Outward.id, row.Outward.outward_no)
        return None

    @staticmethod
    def _probe_order(item_id: int) -> Optional[StateClaim]:
        from custody.data.lifecycle.order import Order, OrderItem
        from custody.data.lifecycle.indent import IndentItem
        from custody.data.lifecycle.inward import Inward, InwardLine

        inwarded = exists().where(and_(
            InwardLine.item_id == IndentItem.item_id,
            InwardLine.source_type == SourceType.ORDER,
            InwardLine.source_ref_id == Order.id,
            Inward.id == InwardLine.inward_id,
            Inward.is_active.is_(True),
        ))

        row = (db.session.query(OrderItem, Order)
               .join(Order, Order.id == OrderItem.order_id)
               .join(IndentItem, IndentItem.id == OrderItem.indent_item_id)
               .filter(IndentItem.item_id == item_id,
                       Order.is_active.is_(True),
                       Order.status.in_(OrderStatus.ALL),
                       ~inwarded)
               .order_by(Order.id.desc())
               .first())
        if row is not None:
            return StateClaim(ItemProcessState.IN_ORDER, 'Order', row.Order.id, row.Order.order_no)
        return None

    @staticmethod
    def _probe_indent(item_id: int, exclude_indent_id: Optional[int]) -> Optional[StateClaim]:
        from custody.data.lifecycle.indent import Indent, IndentItem
        from custody.data.lifecycle.order import Order, OrderItem

        consumed = exists().where(and_(
            OrderItem.indent_item_id == IndentItem.id,
            Order.id == OrderItem.order_id,
            Order.is_active.is_(True),
        ))

        query = (db.session.query(IndentItem, Indent)
                 .join(Indent, Indent.id == IndentItem.indent_id)
                 .filter(IndentItem.item_id == item_id,
                         Indent.is_active.is_(True),
                         Indent.status != IndentStatus.REJECTED,
                         ~consumed))
        if exclude_indent_id is not None:
            query = query.filter(Indent.id != exclude_indent_id)

        row = query.order_by(Indent.id.desc()).first()
        if row is not None:
            return StateClaim(ItemProcessState.IN_INDENT, 'Indent', row.Indent.id, row.Indent.indent_no)
        return None
