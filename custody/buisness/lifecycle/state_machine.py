"""
State machines for lifecycle document statuses

Encodes valid status transitions per document type.
Keeps "what is allowed" separate from "how persistence occurs".
"""

from typing import Dict, Set
from custody.buisness.lifecycle.states import IndentStatus, OrderStatus, QCStatus, JobWorkStatus
from custody.buisness.lifecycle.errors import LifecycleTransitionError


class DocumentStateMachine:
    """Base class; subclasses fill in DOCUMENT and TRANSITIONS."""

    DOCUMENT = 'Document'
    TRANSITIONS: Dict[str, Set[str]] = {}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        return to_status in cls.TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """
        Validate transition and raise exception if invalid.

        Raises:
            LifecycleTransitionError: If transition is not allowed
        """
        if not cls.can_transition(from_status, to_status):
            raise LifecycleTransitionError(
                f"{cls.DOCUMENT} cannot move from {from_status} to {to_status}"
            )

    @classmethod
    def get_allowed_transitions(cls, from_status: str) -> Set[str]:
        return set(cls.TRANSITIONS.get(from_status, set()))


class IndentStateMachine(DocumentStateMachine):
    """
    Pending -> Approved | Rejected; an Approved indent can be reverted to
    Pending while none of its items has been ordered.
    """
    DOCUMENT = 'Indent'
    TRANSITIONS = {
        IndentStatus.PENDING: {IndentStatus.APPROVED, IndentStatus.REJECTED},
        IndentStatus.APPROVED: {IndentStatus.PENDING},
        # Rejected is terminal
    }


class OrderStateMachine(DocumentStateMachine):
    DOCUMENT = 'Order'
    TRANSITIONS = {
        OrderStatus.PENDING: {OrderStatus.APPROVED},
    }


class QCStateMachine(DocumentStateMachine):
    DOCUMENT = 'QC entry'
    TRANSITIONS = {
        QCStatus.PENDING: {QCStatus.APPROVED, QCStatus.REJECTED},
    }


class JobWorkStateMachine(DocumentStateMachine):
    """Completed -> Pending happens only when the completing inward line is removed."""
    DOCUMENT = 'Job work'
    TRANSITIONS = {
        JobWorkStatus.PENDING: {JobWorkStatus.COMPLETED},
        JobWorkStatus.COMPLETED: {JobWorkStatus.PENDING},
    }
