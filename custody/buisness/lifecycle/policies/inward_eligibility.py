"""
Inward Source Eligibility Policy

Decides whether an item may be inwarded against a given source, with one
rule set per kind of source.
"""

from typing import Optional
from custody import db
from custody.buisness.lifecycle.source_ref import (
    AnySource, OrderSource, JobWorkSource, OutwardReturnSource,
)
from custody.buisness.lifecycle.states import ItemProcessState, SourceType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation, DocumentNotFound
from custody.buisness.lifecycle.policies.item_availability import ItemAvailabilityPolicy
from custody.buisness.lifecycle.policies.order_eligibility import OrderInwardProgress


class InwardSourceEligibility:
    """
    Validates one inward line against its source.

    check() returns the external party the item is coming from (if the
    source names one) so the inward header can pick it up.
    """

    @classmethod
    def check(cls, source: Optional[AnySource], item_id: int, company_id: int,
              exclude_inward_id: Optional[int] = None) -> Optional[int]:
        """
        Args:
            source: Tagged source, or None for opening stock
            item_id: Item on the line
            company_id: Caller's company
            exclude_inward_id: Inward being edited; its own lines do not count
                as "already inwarded"

        Returns:
            Optional[int]: Party id the item comes from, if known

        Raises:
            LifecyclePolicyViolation: Source not eligible or item not on source
            DocumentNotFound: Source document missing
            ItemStateConflict: Opening stock for an item that is not NotInStock
        """
        if source is None:
            ItemAvailabilityPolicy.check_state(item_id, ItemProcessState.NOT_IN_STOCK,
                                               "inwarded as opening stock")
            return None
        if isinstance(source, OrderSource):
            return cls._check_order(source, item_id, company_id, exclude_inward_id)
        if isinstance(source, JobWorkSource):
            return cls._check_job_work(source, item_id, company_id, exclude_inward_id)
        if isinstance(source, OutwardReturnSource):
            return cls._check_outward_return(source, item_id, company_id, exclude_inward_id)
        raise LifecyclePolicyViolation(f"Unsupported inward source: {source!r}")

    @staticmethod
    def _already_inwarded(source_type: str, ref_id: int, item_id: int,
                          exclude_inward_id: Optional[int]) -> bool:
        from custody.data.lifecycle.inward import Inward, InwardLine

        query = (db.session.query(InwardLine.id)
                 .join(Inward, Inward.id == InwardLine.inward_id)
                 .filter(InwardLine.source_type == source_type,
                         InwardLine.source_ref_id == ref_id,
                         InwardLine.item_id == item_id,
                         Inward.is_active.is_(True)))
        if exclude_inward_id is not None:
            query = query.filter(Inward.id != exclude_inward_id)
        return query.first() is not None

    @classmethod
    def _check_order(cls, source: OrderSource, item_id: int, company_id: int,
                     exclude_inward_id: Optional[int]) -> Optional[int]:
        from custody.data.lifecycle.order import Order

        order = db.session.get(Order, source.order_id)
        if order is None or order.company_id != company_id:
            raise DocumentNotFound('Order', source.order_id)
        if not order.is_active or not order.is_approved:
            raise LifecyclePolicyViolation(
                f"Order {order.order_no} must be approved and active to inward against it"
            )
        if exclude_inward_id is None and OrderInwardProgress.is_fully_inwarded(order):
            raise LifecyclePolicyViolation(f"Order {order.order_no} is fully inwarded")
        if item_id not in order.item_ids:
            raise LifecyclePolicyViolation(f"Item {item_id} is not on order {order.order_no}")
        if cls._already_inwarded(SourceType.ORDER, order.id, item_id, exclude_inward_id):
            raise LifecyclePolicyViolation(
                f"Item {item_id} has already been inwarded against order {order.order_no}"
            )
        return order.vendor_id

    @classmethod
    def _check_job_work(cls, source: JobWorkSource, item_id: int, company_id: int,
                        exclude_inward_id: Optional[int]) -> Optional[int]:
        from custody.data.lifecycle.job_work import JobWork

        job_work = db.session.get(JobWork, source.job_work_id)
        if job_work is None or job_work.company_id != company_id:
            raise DocumentNotFound('Job work', source.job_work_id)
        if job_work.item_id != item_id:
            raise LifecyclePolicyViolation(
                f"Item {item_id} does not belong to job work {job_work.job_work_no}"
            )
        if cls._already_inwarded(SourceType.JOB_WORK, job_work.id, item_id, exclude_inward_id):
            raise LifecyclePolicyViolation(
                f"Job work {job_work.job_work_no} has already been inwarded"
            )
        if not job_work.is_pending:
            raise LifecyclePolicyViolation(
                f"Job work {job_work.job_work_no} is {job_work.status}; only pending job work can be inwarded"
            )
        return job_work.to_party_id

    @classmethod
    def _check_outward_return(cls, source: OutwardReturnSource, item_id: int, company_id: int,
                              exclude_inward_id: Optional[int]) -> Optional[int]:
        from custody.data.lifecycle.outward import Outward
        from custody.data.lifecycle.movement import Movement

        outward = db.session.get(Outward, source.outward_id)
        if outward is None or outward.company_id != company_id:
            raise DocumentNotFound('Outward', source.outward_id)
        if not outward.is_active:
            raise LifecyclePolicyViolation(f"Outward {outward.outward_no} is inactive")
        if item_id not in outward.item_ids:
            raise LifecyclePolicyViolation(f"Item {item_id} is not on outward {outward.outward_no}")
        returned_by_movement = (Movement.query
                                .filter_by(outward_id=outward.id, item_id=item_id)
                                .first() is not None)
        if returned_by_movement or cls._already_inwarded(
                SourceType.OUTWARD_RETURN, outward.id, item_id, exclude_inward_id):
            raise LifecyclePolicyViolation(
                f"Item {item_id} has already been returned against outward {outward.outward_no}"
            )
        return outward.party_id
