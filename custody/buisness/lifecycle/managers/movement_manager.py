"""
MovementManager - ad-hoc custody transfers

Issue flips custody to the party at once. Receive / SystemReturn record a
QC-pending movement; custody moves to the destination location when the
movement's QC is resolved (approved or not, only the flag differs).
"""

from datetime import datetime
from typing import Optional, List
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import MovementType, HolderType
from custody.buisness.lifecycle.errors import LifecycleTransitionError
from custody.buisness.lifecycle.policies import MovementRulesPolicy
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.movement")


class MovementManager(LifecycleManager):

    DOCUMENT_KIND = 'movement'

    def create(self, movement_type: str, item_id: int, to_party_id: Optional[int] = None,
               to_location_id: Optional[int] = None, reason: Optional[str] = None,
               remarks: Optional[str] = None, attachment_urls: Optional[List[str]] = None):
        """
        Record a movement for one item.

        Args:
            movement_type: Issue / Receive / SystemReturn
            item_id: Item being moved
            to_party_id: Destination party (Issue only)
            to_location_id: Destination location for returns; defaults to the caller's
            reason: Mandatory for SystemReturn

        Returns:
            Movement: The new movement

        Raises:
            LifecyclePolicyViolation: Movement rule broken
            ItemStateConflict: Item claimed by another process
        """
        from custody.data.lifecycle.movement import Movement

        with atomic('movement.create'):
            location_id = self._require_location()
            item = self._lock_item(item_id)
            if to_party_id is not None:
                self._party(to_party_id)
            MovementRulesPolicy.check(movement_type, item, location_id,
                                      to_party_id=to_party_id, to_location_id=to_location_id,
                                      reason=reason)

            movement = Movement(
                movement_no=self._next_code(location_id),
                company_id=self.ctx.company_id,
                movement_type=movement_type,
                item_id=item.id,
                from_holder_type=item.holder_type,
                from_location_id=item.current_location_id,
                from_party_id=item.current_party_id,
                reason=reason,
                remarks=remarks,
                attachment_urls=list(attachment_urls or []),
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )

            if movement_type == MovementType.ISSUE:
                movement.to_holder_type = HolderType.VENDOR
                movement.to_party_id = to_party_id
                movement.is_qc_pending = False
                CustodyResolver.to_party(item, to_party_id)
            else:
                movement.to_holder_type = HolderType.LOCATION
                movement.to_location_id = location_id
                movement.is_qc_pending = True
                claim = ItemStateEngine.find_claim(item.id)
                if claim.doc_type == 'Outward':
                    movement.outward_id = claim.doc_id

            db.session.add(movement)
            self._sync([item])
            logger.info(f"Movement {movement.movement_no} ({movement_type}) recorded for item {item.id}")
        return movement

    def resolve_qc(self, movement_id: int, approved: bool, remarks: Optional[str] = None):
        """
        Close the QC of a returning movement and land the item at its destination.

        Raises:
            LifecycleTransitionError: Not a returning movement, or QC already done
        """
        from custody.data.lifecycle.movement import Movement

        with atomic('movement.resolve_qc'):
            movement = self._get(Movement, movement_id, 'Movement')
            if not movement.is_returning or not movement.is_qc_pending:
                raise LifecycleTransitionError(
                    f"Movement {movement.movement_no} has no pending QC"
                )
            item = self._lock_item(movement.item_id)

            movement.is_qc_pending = False
            movement.is_qc_approved = bool(approved)
            movement.qc_remarks = remarks
            movement.qc_by_id = self.ctx.actor_id
            movement.qc_at = datetime.utcnow()
            movement.touch(self.ctx.actor_id)
            CustodyResolver.to_location(item, movement.to_location_id)

            self._sync([item])
            logger.info(f"Movement {movement.movement_no} QC {'approved' if approved else 'rejected'}")
        return movement
