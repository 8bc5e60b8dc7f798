"""
Item Availability Policy

Guards that an item is free for the process about to claim it. Decisions are
made on the derived state, never on the cached Item.process_state.
"""

from typing import Iterable, Optional, List
from collections import Counter
from custody.buisness.lifecycle.state_engine import ItemStateEngine, StateClaim
from custody.buisness.lifecycle.states import ItemProcessState
from custody.buisness.lifecycle.errors import ItemStateConflict, LifecyclePolicyViolation


class ItemAvailabilityPolicy:
    """
    Policy answering "is this item available for X".

    Each check raises ItemStateConflict naming the item's actual state and
    the document holding it.
    """

    @classmethod
    def check_state(cls, item_id: int, expected: str, action: str,
                    exclude_indent_id: Optional[int] = None) -> StateClaim:
        """
        Require the item's derived state to equal `expected`.

        Args:
            item_id: Item to check
            expected: Required ItemProcessState value
            action: Human readable action for the error ("sent on job work")
            exclude_indent_id: Indent to ignore while probing

        Returns:
            StateClaim: The (matching) claim

        Raises:
            ItemStateConflict: If the item is in any other state
        """
        claim = ItemStateEngine.find_claim(item_id, exclude_indent_id)
        if claim.state != expected:
            raise ItemStateConflict(
                item_id,
                claim.state,
                f"Item {item_id} cannot be {action}: it must be "
                f"{ItemProcessState.describe(expected)}; it is {claim.describe()}",
            )
        return claim

    @classmethod
    def check_in_stock(cls, item_id: int, action: str) -> StateClaim:
        return cls.check_state(item_id, ItemProcessState.IN_STOCK, action)

    @classmethod
    def check_can_add_to_indent(cls, item_id: int, exclude_indent_id: Optional[int] = None) -> StateClaim:
        return cls.check_state(item_id, ItemProcessState.NOT_IN_STOCK, "added to an indent", exclude_indent_id)

    @classmethod
    def check_no_active_claim(cls, item_id: int, action: str) -> StateClaim:
        """Item must sit in stock or out of stock with no document claiming it."""
        claim = ItemStateEngine.find_claim(item_id)
        if claim.state not in (ItemProcessState.IN_STOCK, ItemProcessState.NOT_IN_STOCK):
            raise ItemStateConflict(
                item_id,
                claim.state,
                f"Item {item_id} cannot be {action}: it is {claim.describe()}",
            )
        return claim

    @staticmethod
    def check_unique(ids: Iterable[int], what: str = 'item') -> List[int]:
        """Reject duplicated ids in one request; returns the ids as a list."""
        try:
            ids = [int(i) for i in ids]
        except (TypeError, ValueError):
            raise LifecyclePolicyViolation(f"{what.capitalize()} ids must be integers")
        duplicates = sorted(i for i, count in Counter(ids).items() if count > 1)
        if duplicates:
            raise LifecyclePolicyViolation(
                f"Duplicate {what} ids in request: {', '.join(str(d) for d in duplicates)}"
            )
        return ids

    @staticmethod
    def check_not_empty(ids: List[int], what: str) -> None:
        if not ids:
            raise LifecyclePolicyViolation(f"At least one {what} is required")
