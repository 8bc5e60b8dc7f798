"""
QC claim and resolution policies
"""

from typing import List, Set, Iterable
from custody import db
from custody.buisness.lifecycle.states import QCStatus, QCResolution, ItemProcessState
from custody.buisness.lifecycle.errors import (
    LifecyclePolicyViolation, LifecycleTransitionError, DocumentNotFound, ItemStateConflict,
)
from custody.buisness.lifecycle.policies.item_availability import ItemAvailabilityPolicy


class QCClaimPolicy:
    """An inward line can be inspected by one pending QC entry at a time."""

    @classmethod
    def item_ids(cls, inward_line_ids: Iterable[int], company_id: int) -> List[int]:
        """Items behind the requested inward lines, so callers can lock them before checking."""
        from custody.data.lifecycle.inward import Inward, InwardLine

        ids = ItemAvailabilityPolicy.check_unique(inward_line_ids, 'inward line')
        if not ids:
            return []
        rows = (db.session.query(InwardLine.item_id)
                .join(Inward, Inward.id == InwardLine.inward_id)
                .filter(InwardLine.id.in_(ids), Inward.company_id == company_id)
                .all())
        return [row.item_id for row in rows]

    @classmethod
    def lines_in_pending_entries(cls, inward_line_ids: Iterable[int]) -> Set[int]:
        from custody.data.lifecycle.quality_control import QCEntry, QCItem

        ids = list(inward_line_ids)
        if not ids:
            return set()
        rows = (db.session.query(QCItem.inward_line_id)
                .join(QCEntry, QCEntry.id == QCItem.qc_entry_id)
                .filter(QCItem.inward_line_id.in_(ids), QCEntry.status == QCStatus.PENDING)
                .all())
        return {row.inward_line_id for row in rows}

    @classmethod
    def lines_in_any_entry(cls, inward_line_ids: Iterable[int]) -> Set[int]:
        from custody.data.lifecycle.quality_control import QCItem

        ids = list(inward_line_ids)
        if not ids:
            return set()
        rows = db.session.query(QCItem.inward_line_id).filter(QCItem.inward_line_id.in_(ids)).all()
        return {row.inward_line_id for row in rows}

    @classmethod
    def check(cls, inward_line_ids: List[int], location_id: int, company_id: int) -> list:
        """
        Validate inward lines for a new QC entry.

        Returns:
            list: InwardLine rows in request order

        Raises:
            LifecyclePolicyViolation: Empty/duplicate ids, wrong location, not awaiting QC
            DocumentNotFound: Unknown inward line
            ItemStateConflict: Line already claimed by another pending QC entry
        """
        from custody.data.lifecycle.inward import InwardLine

        ids = ItemAvailabilityPolicy.check_unique(inward_line_ids, 'inward line')
        ItemAvailabilityPolicy.check_not_empty(ids, 'inward line')

        lines = []
        for line_id in ids:
            line = db.session.get(InwardLine, line_id)
            if line is None or line.inward.company_id != company_id:
                raise DocumentNotFound('Inward line', line_id)
            if not line.inward.is_active:
                raise LifecyclePolicyViolation(f"Inward {line.inward.inward_no} is inactive")
            if line.inward.location_id != location_id:
                raise LifecyclePolicyViolation(
                    f"Inward line {line_id} was received at another location"
                )
            if not line.is_qc_pending:
                raise LifecyclePolicyViolation(f"Inward line {line_id} is not awaiting QC")
            lines.append(line)

        claimed = cls.lines_in_pending_entries(ids)
        if claimed:
            line = next(candidate for candidate in lines if candidate.id in claimed)
            raise ItemStateConflict(
                line.item_id,
                ItemProcessState.IN_QC,
                f"Inward line {line.id} (item {line.item_id}) is already in a pending QC entry",
            )
        return lines


class QCResolutionPolicy:

    @classmethod
    def check_mutable(cls, entry) -> None:
        if not entry.is_pending:
            raise LifecycleTransitionError(
                f"QC entry {entry.qc_no} is {entry.status}; its items can no longer change"
            )

    @classmethod
    def check_resolution(cls, resolution: str) -> None:
        if resolution not in (QCResolution.APPROVED, QCResolution.REJECTED):
            raise LifecyclePolicyViolation(
                f"Resolution must be {QCResolution.APPROVED} or {QCResolution.REJECTED}"
            )

    @classmethod
    def check_all_resolved(cls, entry) -> None:
        unresolved = entry.unresolved_items
        if unresolved:
            raise LifecyclePolicyViolation(
                f"QC entry {entry.qc_no} has {len(unresolved)} unresolved item(s)"
            )
