"""
Movement Rules Policy

Issue: location -> party, only for in-stock items held by the caller's location.
Receive / SystemReturn: party -> caller's location, only for items held by a party.
Party-to-party transfers are never allowed.
"""

from typing import Optional
from custody.buisness.lifecycle.states import MovementType, HolderType, ItemProcessState
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies.item_availability import ItemAvailabilityPolicy


class MovementRulesPolicy:

    @classmethod
    def check(cls, movement_type: str, item, location_id: int,
              to_party_id: Optional[int] = None, to_location_id: Optional[int] = None,
              reason: Optional[str] = None) -> None:
        """
        Validate a movement request.

        Args:
            movement_type: Issue / Receive / SystemReturn
            item: Locked Item row
            location_id: Caller's location
            to_party_id: Destination party (Issue)
            to_location_id: Destination location (returns; defaults to caller's)
            reason: Required for SystemReturn

        Raises:
            LifecyclePolicyViolation: Rule broken
            ItemStateConflict: Item claimed by another process
        """
        if movement_type not in MovementType.ALL:
            raise LifecyclePolicyViolation(f"Unknown movement type: {movement_type!r}")

        if movement_type == MovementType.ISSUE:
            cls._check_issue(item, location_id, to_party_id, to_location_id)
        else:
            cls._check_return(movement_type, item, location_id, to_party_id, to_location_id, reason)

    @staticmethod
    def _check_issue(item, location_id, to_party_id, to_location_id) -> None:
        if to_location_id is not None or not to_party_id:
            raise LifecyclePolicyViolation("An issue must go to a party")
        if item.holder_type != HolderType.LOCATION or item.current_location_id != location_id:
            raise LifecyclePolicyViolation(
                f"Item {item.id} is not held by location {location_id}"
            )
        ItemAvailabilityPolicy.check_in_stock(item.id, "issued")

    @staticmethod
    def _check_return(movement_type, item, location_id, to_party_id, to_location_id, reason) -> None:
        if item.holder_type != HolderType.VENDOR or item.current_party_id is None:
            raise LifecyclePolicyViolation(f"Item {item.id} is not held by a party")
        if to_party_id is not None:
            raise LifecyclePolicyViolation("Party-to-party transfers are not allowed")
        if to_location_id is not None and to_location_id != location_id:
            raise LifecyclePolicyViolation("Returned items must come back to the caller's location")
        if movement_type == MovementType.SYSTEM_RETURN and not (reason or '').strip():
            raise LifecyclePolicyViolation("A system return requires a reason")
        ItemAvailabilityPolicy.check_state(item.id, ItemProcessState.OUTWARD, "received back")
