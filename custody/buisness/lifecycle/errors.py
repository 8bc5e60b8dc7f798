"""
Domain exceptions for item lifecycle business logic

These exceptions represent business rule violations and domain-specific errors.
They are raised by the business layer before any write happens, and carry the
HTTP status and error kind the API reports for them.
"""

from typing import Optional


class LifecycleDomainError(Exception):
    """Base exception for all lifecycle domain errors"""

    http_status = 400
    kind = 'domain_error'
    retryable = False

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            'success': False,
            'error': self.kind,
            'message': self.message,
        }


class PermissionDenied(LifecycleDomainError):
    """Raised when the caller lacks the permission for an action"""
    http_status = 403
    kind = 'permission_denied'

    def __init__(self, action: str):
        super().__init__(f"Permission '{action}' is required")
        self.action = action


class LifecyclePolicyViolation(LifecycleDomainError):
    """Raised when a business policy/rule is violated (bad input, wrong status)"""
    kind = 'validation'


class LifecycleTransitionError(LifecycleDomainError):
    """Raised when a document status transition is invalid or not allowed"""
    kind = 'invalid_transition'


class DocumentNotFound(LifecycleDomainError):
    """Raised when a referenced document or row does not exist"""
    http_status = 404
    kind = 'not_found'

    def __init__(self, doc_type: str, doc_id):
        super().__init__(f"{doc_type} {doc_id} not found")
        self.doc_type = doc_type
        self.doc_id = doc_id


class ItemStateConflict(LifecycleDomainError):
    """Raised when an item is claimed by another process or is in the wrong state"""
    http_status = 409
    kind = 'conflict'

    def __init__(self, item_id: int, current_state: str, message: Optional[str] = None):
        from custody.buisness.lifecycle.states import ItemProcessState
        if message is None:
            message = (f"Item {item_id} is {ItemProcessState.describe(current_state)} "
                       f"({current_state})")
        super().__init__(message)
        self.item_id = item_id
        self.current_state = current_state

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['item_id'] = self.item_id
        data['current_state'] = self.current_state
        return data


class ConcurrentModificationError(LifecycleDomainError):
    """Raised when another request changed the item first; the caller may retry"""
    http_status = 409
    kind = 'concurrent_modification'
    retryable = True

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['retryable'] = True
        return data


class LifecycleIntegrityError(LifecycleDomainError):
    """Raised when a transaction fails for a non-domain reason; details are logged, not returned"""
    http_status = 500
    kind = 'integrity'

    def __init__(self, message: str = 'The operation could not be completed. No changes were saved.'):
        super().__init__(message)
