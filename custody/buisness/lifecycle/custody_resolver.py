"""
Custody resolver

Applies holder changes to an item while keeping the holder invariant:
exactly one of location / party is set, matching holder_type.
"""

from typing import Optional
from custody.buisness.lifecycle.states import HolderType
from custody.buisness.lifecycle.errors import LifecycleIntegrityError
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.custody")


class CustodyResolver:

    @classmethod
    def to_location(cls, item, location_id: int) -> None:
        cls._apply(item, HolderType.LOCATION, location_id, None)

    @classmethod
    def to_party(cls, item, party_id: int) -> None:
        cls._apply(item, HolderType.VENDOR, None, party_id)

    @classmethod
    def to_not_in_stock(cls, item) -> None:
        cls._apply(item, HolderType.NOT_IN_STOCK, None, None)

    @classmethod
    def restore(cls, item, holder_type: Optional[str], location_id: Optional[int], party_id: Optional[int]) -> None:
        """Put an item back to a previously snapshotted holder."""
        if holder_type is None:
            holder_type = HolderType.NOT_IN_STOCK
        cls._apply(item, holder_type, location_id, party_id)

    @staticmethod
    def _apply(item, holder_type: str, location_id: Optional[int], party_id: Optional[int]) -> None:
        before = (item.holder_type, item.current_location_id, item.current_party_id)
        item.holder_type = holder_type
        item.current_location_id = location_id
        item.current_party_id = party_id
        if not item.holder_is_consistent():
            logger.error(f"Holder invariant broken for item {item.id}: "
                         f"{holder_type} location={location_id} party={party_id}")
            raise LifecycleIntegrityError()
        if before != (holder_type, location_id, party_id):
            logger.debug(f"Item {item.id} custody {before} -> {(holder_type, location_id, party_id)}")
