"""
Vocabulary of the item lifecycle: process states, holder tags and the
status values of each document type.
"""

from typing import Dict


class ItemProcessState:
    """The seven canonical process states an item can be in."""

    NOT_IN_STOCK = 'NotInStock'
    IN_INDENT = 'InIndent'
    IN_ORDER = 'InOrder'
    IN_QC = 'InQC'
    IN_JOB_WORK = 'InJobWork'
    OUTWARD = 'Outward'
    IN_STOCK = 'InStock'

    ALL = (NOT_IN_STOCK, IN_INDENT, IN_ORDER, IN_QC, IN_JOB_WORK, OUTWARD, IN_STOCK)

    LABELS: Dict[str, str] = {
        NOT_IN_STOCK: 'Not in stock',
        IN_INDENT: 'In purchase indent',
        IN_ORDER: 'In purchase order',
        IN_QC: 'Awaiting quality control',
        IN_JOB_WORK: 'In job work',
        OUTWARD: 'Outward (with party)',
        IN_STOCK: 'In-Stock',
    }

    @classmethod
    def describe(cls, state: str) -> str:
        return cls.LABELS.get(state, state)


class HolderType:
    """Who physically holds an item."""

    LOCATION = 'Location'
    VENDOR = 'Vendor'
    NOT_IN_STOCK = 'NotInStock'

    ALL = (LOCATION, VENDOR, NOT_IN_STOCK)


class IndentType:
    NEW = 'New'
    REPAIR = 'Repair'
    CORRECTION = 'Correction'
    MODIFICATION = 'Modification'

    ALL = (NEW, REPAIR, CORRECTION, MODIFICATION)


class IndentStatus:
    PENDING = 'Pending'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'

    ALL = (PENDING, APPROVED, REJECTED)


class OrderStatus:
    PENDING = 'Pending'
    APPROVED = 'Approved'

    ALL = (PENDING, APPROVED)


class QCStatus:
    PENDING = 'Pending'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'

    ALL = (PENDING, APPROVED, REJECTED)


class QCResolution:
    UNRESOLVED = 'Unresolved'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'

    ALL = (UNRESOLVED, APPROVED, REJECTED)


class JobWorkStatus:
    PENDING = 'Pending'
    COMPLETED = 'Completed'

    ALL = (PENDING, COMPLETED)


class MovementType:
    ISSUE = 'Issue'
    RECEIVE = 'Receive'
    SYSTEM_RETURN = 'SystemReturn'

    ALL = (ISSUE, RECEIVE, SYSTEM_RETURN)
    # Movements that bring an item back and go through QC
    RETURNING = (RECEIVE, SYSTEM_RETURN)


class SourceType:
    """Kinds of document an inward line can be sourced from."""

    ORDER = 'Order'
    JOB_WORK = 'JobWork'
    OUTWARD_RETURN = 'OutwardReturn'

    ALL = (ORDER, JOB_WORK, OUTWARD_RETURN)
