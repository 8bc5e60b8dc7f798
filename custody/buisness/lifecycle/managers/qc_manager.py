"""
QCManager - quality control over inward lines

Item-level resolutions are recorded while the entry is Pending. The entry
decision (approve / reject) applies every outcome in one transaction:
each item lands In-Stock at the QC location, and its inward line is marked
approved or rejected.
"""

from datetime import datetime
from typing import List, Optional
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.state_machine import QCStateMachine
from custody.buisness.lifecycle.states import QCStatus, QCResolution
from custody.buisness.lifecycle.errors import DocumentNotFound
from custody.buisness.lifecycle.policies import QCClaimPolicy, QCResolutionPolicy
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.qc")


class QCManager(LifecycleManager):

    DOCUMENT_KIND = 'qc'

    def create(self, inward_line_ids: List[int], remarks: Optional[str] = None,
               attachment_urls: Optional[List[str]] = None):
        """
        Open a Pending QC entry over inward lines awaiting QC at the caller's location.

        Raises:
            LifecyclePolicyViolation: Line not awaiting QC / other location
            ItemStateConflict: Line already claimed by another pending entry
        """
        from custody.data.lifecycle.quality_control import QCEntry, QCItem

        with atomic('qc.create'):
            location_id = self._require_location()
            items = self._lock_items(QCClaimPolicy.item_ids(inward_line_ids, self.ctx.company_id))
            lines = QCClaimPolicy.check(inward_line_ids, location_id, self.ctx.company_id)

            entry = QCEntry(
                qc_no=self._next_code(location_id),
                company_id=self.ctx.company_id,
                location_id=location_id,
                status=QCStatus.PENDING,
                remarks=remarks,
                attachment_urls=list(attachment_urls or []),
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            for line in lines:
                entry.items.append(QCItem(inward_line_id=line.id,
                                          resolution=QCResolution.UNRESOLVED,
                                          created_by_id=self.ctx.actor_id))
            db.session.add(entry)

            self._sync(items)
            logger.info(f"QC entry {entry.qc_no} opened over {len(lines)} line(s)")
        return entry

    def resolve_item(self, qc_item_id: int, resolution: str, remarks: Optional[str] = None):
        """Record Approved / Rejected on one QC item of a Pending entry."""
        from custody.data.lifecycle.quality_control import QCItem

        with atomic('qc.resolve_item'):
            qc_item = db.session.get(QCItem, qc_item_id)
            if qc_item is None or qc_item.qc_entry.company_id != self.ctx.company_id:
                raise DocumentNotFound('QC item', qc_item_id)
            QCResolutionPolicy.check_mutable(qc_item.qc_entry)
            QCResolutionPolicy.check_resolution(resolution)
            qc_item.resolution = resolution
            if remarks is not None:
                qc_item.remarks = remarks
            qc_item.touch(self.ctx.actor_id)
            logger.info(f"QC item {qc_item.id} of {qc_item.qc_entry.qc_no} resolved {resolution}")
        return qc_item

    def approve(self, entry_id: int, remarks: Optional[str] = None):
        """
        Pending -> Approved once every item is resolved; applies each item's outcome.

        Raises:
            LifecycleTransitionError: Entry not Pending
            LifecyclePolicyViolation: Unresolved items remain
        """
        from custody.data.lifecycle.quality_control import QCEntry

        with atomic('qc.approve'):
            entry = self._get(QCEntry, entry_id, 'QC entry')
            QCStateMachine.validate_transition(entry.status, QCStatus.APPROVED)
            QCResolutionPolicy.check_all_resolved(entry)
            self._decide(entry, QCStatus.APPROVED, remarks)
        return entry

    def reject(self, entry_id: int, remarks: Optional[str] = None):
        """Pending -> Rejected; every item is rejected."""
        from custody.data.lifecycle.quality_control import QCEntry

        with atomic('qc.reject'):
            entry = self._get(QCEntry, entry_id, 'QC entry')
            QCStateMachine.validate_transition(entry.status, QCStatus.REJECTED)
            for qc_item in entry.items:
                qc_item.resolution = QCResolution.REJECTED
            self._decide(entry, QCStatus.REJECTED, remarks)
        return entry

    def _decide(self, entry, status: str, remarks: Optional[str]) -> None:
        items = self._lock_items([qc_item.item_id for qc_item in entry.items])
        by_id = {item.id: item for item in items}

        for qc_item in entry.items:
            line = qc_item.inward_line
            approved = qc_item.resolution == QCResolution.APPROVED
            line.is_qc_pending = False
            line.is_qc_approved = approved
            CustodyResolver.to_location(by_id[line.item_id], entry.location_id)

        entry.status = status
        entry.decided_by_id = self.ctx.actor_id
        entry.decided_at = datetime.utcnow()
        if remarks is not None:
            entry.remarks = remarks
        entry.touch(self.ctx.actor_id)

        self._sync(items)
        logger.info(f"QC entry {entry.qc_no} {status.lower()} ({len(items)} item(s))")
