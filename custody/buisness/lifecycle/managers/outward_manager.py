"""
OutwardManager - dispatch in-stock items to a party
"""

from typing import List, Optional, Dict, Any
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import ItemAvailabilityPolicy
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.outward")


class OutwardManager(LifecycleManager):

    DOCUMENT_KIND = 'outward'

    def create(self, party_id: int, lines: List[Dict[str, Any]], remarks: Optional[str] = None,
               attachment_urls: Optional[List[str]] = None):
        """
        Hand items over to a party. Each item must be In-Stock at the
        caller's location; afterwards it is held by the party.

        Args:
            party_id: Receiving party
            lines: [{"item_id": int, "remarks": str?}, ...]

        Raises:
            LifecyclePolicyViolation: No lines, duplicates, item at another location
            ItemStateConflict: Item not In-Stock (the error names its state)
        """
        from custody.data.lifecycle.outward import Outward, OutwardLine

        with atomic('outward.create'):
            location_id = self._require_location()
            self._party(party_id)
            if not lines:
                raise LifecyclePolicyViolation("At least one outward line is required")
            try:
                ids = ItemAvailabilityPolicy.check_unique([line['item_id'] for line in lines])
            except (KeyError, TypeError, ValueError):
                raise LifecyclePolicyViolation("Each outward line needs an integer item_id")

            items = self._lock_items(ids)
            for item in items:
                ItemAvailabilityPolicy.check_in_stock(item.id, "sent outward")
                if item.current_location_id != location_id:
                    raise LifecyclePolicyViolation(f"Item {item.id} is not held at location {location_id}")

            outward = Outward(
                outward_no=self._next_code(location_id),
                company_id=self.ctx.company_id,
                location_id=location_id,
                party_id=party_id,
                remarks=remarks,
                attachment_urls=list(attachment_urls or []),
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            for item, line in zip(items, lines):
                outward.lines.append(OutwardLine(item_id=item.id, remarks=line.get('remarks'),
                                                 created_by_id=self.ctx.actor_id))
                CustodyResolver.to_party(item, party_id)
            db.session.add(outward)

            self._sync(items)
            logger.info(f"Outward {outward.outward_no} sent {len(items)} item(s) to party {party_id}")
        return outward
