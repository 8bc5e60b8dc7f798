"""
InwardManager - receipt of items into a location

Every inward line puts its item at the inward location awaiting QC. A line
sourced from a job work completes that job work. Updating an inward unwinds
the custody effects of removed lines from the holder snapshot kept on them.
"""

from typing import List, Optional, Dict, Any, Tuple
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.source_ref import SourceRef, JobWorkSource
from custody.buisness.lifecycle.state_machine import JobWorkStateMachine
from custody.buisness.lifecycle.states import JobWorkStatus, SourceType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import (
    ItemAvailabilityPolicy, InwardSourceEligibility, QCClaimPolicy,
)
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.inward")


class InwardManager(LifecycleManager):

    DOCUMENT_KIND = 'inward'

    def create(self, lines: List[Dict[str, Any]], party_id: Optional[int] = None,
               remarks: Optional[str] = None, attachment_urls: Optional[List[str]] = None):
        """
        Receive items at the caller's location.

        Args:
            lines: [{"item_id": int, "source_type"/"source_ref_id" or
                     "order_id"/"job_work_id"/"outward_id", "remarks"}, ...]
            party_id: Sending party; defaults to the first party resolved from a source
            remarks: Free text
            attachment_urls: Stored as given

        Returns:
            Inward: The new inward

        Raises:
            LifecyclePolicyViolation: No lines, duplicates, source not eligible
            ItemStateConflict: Opening stock for an item that is not NotInStock
        """
        from custody.data.lifecycle.inward import Inward

        with atomic('inward.create'):
            location_id = self._require_location()
            parsed = self._parse_lines(lines)
            if party_id is not None:
                self._party(party_id)

            items = self._lock_items([item_id for item_id, _, _ in parsed])
            resolved_party = None
            for item_id, source, _ in parsed:
                source_party = InwardSourceEligibility.check(source, item_id, self.ctx.company_id)
                if resolved_party is None and source_party is not None:
                    resolved_party = source_party

            inward = Inward(
                inward_no=self._next_code(location_id),
                company_id=self.ctx.company_id,
                location_id=location_id,
                party_id=party_id if party_id is not None else resolved_party,
                remarks=remarks,
                attachment_urls=list(attachment_urls or []),
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            db.session.add(inward)

            by_id = {item.id: item for item in items}
            for item_id, source, line_remarks in parsed:
                self._add_line(inward, by_id[item_id], source, line_remarks)

            self._sync(items)
            logger.info(f"Inward {inward.inward_no} created with {len(parsed)} line(s) at location {location_id}")
        return inward

    def update(self, inward_id: int, lines: Optional[List[Dict[str, Any]]] = None,
               party_id: Optional[int] = None, remarks: Optional[str] = None,
               attachment_urls: Optional[List[str]] = None):
        """
        Edit an inward that no QC entry has touched yet.

        Lines with the same item and source are kept; removed lines restore
        the item's previous holder (and reopen a completed job work); new
        lines are validated and applied like on create.

        Raises:
            LifecyclePolicyViolation: Inward inactive, or a line is already in a QC entry
        """
        from custody.data.lifecycle.inward import Inward

        with atomic('inward.update'):
            inward = self._get(Inward, inward_id, 'Inward')
            if not inward.is_active:
                raise LifecyclePolicyViolation(f"Inward {inward.inward_no} is inactive")
            if QCClaimPolicy.lines_in_any_entry([line.id for line in inward.lines]):
                raise LifecyclePolicyViolation(
                    f"Inward {inward.inward_no} cannot be edited: QC has already started on it"
                )

            if party_id is not None:
                self._party(party_id)
                inward.party_id = party_id
            if remarks is not None:
                inward.remarks = remarks
            if attachment_urls is not None:
                inward.attachment_urls = list(attachment_urls)

            touched = []
            if lines is not None:
                parsed = self._parse_lines(lines)
                current = {(line.item_id, line.source_type, line.source_ref_id): line for line in inward.lines}
                wanted = {}
                for item_id, source, line_remarks in parsed:
                    source_type, ref_id = SourceRef.to_columns(source)
                    wanted[(item_id, source_type, ref_id)] = (item_id, source, line_remarks)

                removed = [line for key, line in current.items() if key not in wanted]
                added = [value for key, value in wanted.items() if key not in current]

                touched = self._lock_items([line.item_id for line in removed] +
                                           [item_id for item_id, _, _ in added])
                by_id = {item.id: item for item in touched}

                for line in removed:
                    self._unwind_line(inward, line, by_id[line.item_id])
                db.session.flush()

                for item_id, source, _ in added:
                    InwardSourceEligibility.check(source, item_id, self.ctx.company_id,
                                                  exclude_inward_id=inward.id)
                for item_id, source, line_remarks in added:
                    self._add_line(inward, by_id[item_id], source, line_remarks)

                for key, line in current.items():
                    if key in wanted and wanted[key][2] is not None:
                        line.remarks = wanted[key][2]

                if not inward.party_id:
                    inward.party_id = self._first_party(inward)

            inward.touch(self.ctx.actor_id)
            self._sync(touched)
            logger.info(f"Inward {inward.inward_no} updated")
        return inward

    def _add_line(self, inward, item, source, remarks):
        from custody.data.lifecycle.inward import InwardLine
        from custody.data.lifecycle.job_work import JobWork

        source_type, ref_id = SourceRef.to_columns(source)
        snapshot = item.holder_snapshot()
        inward.lines.append(InwardLine(
            item_id=item.id,
            source_type=source_type,
            source_ref_id=ref_id,
            remarks=remarks,
            is_qc_pending=True,
            is_qc_approved=False,
            from_holder_type=snapshot['holder_type'],
            from_location_id=snapshot['location_id'],
            from_party_id=snapshot['party_id'],
            created_by_id=self.ctx.actor_id,
        ))
        CustodyResolver.to_location(item, inward.location_id)

        if isinstance(source, JobWorkSource):
            job_work = db.session.get(JobWork, source.job_work_id)
            JobWorkStateMachine.validate_transition(job_work.status, JobWorkStatus.COMPLETED)
            job_work.status = JobWorkStatus.COMPLETED
            job_work.touch(self.ctx.actor_id)

    def _unwind_line(self, inward, line, item):
        from custody.data.lifecycle.job_work import JobWork

        CustodyResolver.restore(item, line.from_holder_type, line.from_location_id, line.from_party_id)
        if line.source_type == SourceType.JOB_WORK:
            job_work = db.session.get(JobWork, line.source_ref_id)
            if job_work is not None and job_work.status == JobWorkStatus.COMPLETED:
                JobWorkStateMachine.validate_transition(job_work.status, JobWorkStatus.PENDING)
                job_work.status = JobWorkStatus.PENDING
                job_work.touch(self.ctx.actor_id)
        inward.lines.remove(line)
        logger.debug(f"Inward {inward.inward_no}: removed line for item {item.id}, custody restored")

    @staticmethod
    def _first_party(inward) -> Optional[int]:
        from custody.data.lifecycle.order import Order
        from custody.data.lifecycle.job_work import JobWork
        from custody.data.lifecycle.outward import Outward

        for line in inward.lines:
            if line.source_type == SourceType.ORDER:
                order = db.session.get(Order, line.source_ref_id)
                if order is not None:
                    return order.vendor_id
            elif line.source_type == SourceType.JOB_WORK:
                job_work = db.session.get(JobWork, line.source_ref_id)
                if job_work is not None and job_work.to_party_id:
                    return job_work.to_party_id
            elif line.source_type == SourceType.OUTWARD_RETURN:
                outward = db.session.get(Outward, line.source_ref_id)
                if outward is not None:
                    return outward.party_id
        return None

    @staticmethod
    def _parse_lines(lines: List[Dict[str, Any]]) -> List[Tuple[int, Any, Optional[str]]]:
        if not lines:
            raise LifecyclePolicyViolation("At least one inward line is required")
        parsed = []
        for line in lines:
            try:
                item_id = int(line['item_id'])
            except (KeyError, TypeError, ValueError):
                raise LifecyclePolicyViolation("Each inward line needs an integer item_id")
            parsed.append((item_id, SourceRef.from_payload(line), line.get('remarks')))
        ItemAvailabilityPolicy.check_unique([item_id for item_id, _, _ in parsed])
        return parsed
