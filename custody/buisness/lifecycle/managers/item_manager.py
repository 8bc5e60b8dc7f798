"""
ItemManager - item registration and administrative operations

Registration, name/revision changes (audit-logged), soft deactivation and
the administrative reset of an in-stock item to NotInStock.
"""

from typing import Optional
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.custody_resolver import CustodyResolver
from custody.buisness.lifecycle.states import ItemProcessState, HolderType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import ItemAvailabilityPolicy
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.item")


class ItemManager(LifecycleManager):

    def register(self, main_part_name: str, current_name: Optional[str] = None,
                 revision_no: str = '0', item_type: Optional[str] = None,
                 material: Optional[str] = None, drawing_no: Optional[str] = None):
        """Register a new item; it starts NotInStock with no holder."""
        from custody.data.core.item import Item

        with atomic('item.register'):
            name = (main_part_name or '').strip()
            if not name:
                raise LifecyclePolicyViolation("main_part_name is required")
            if Item.query.filter_by(company_id=self.ctx.company_id, main_part_name=name).first():
                raise LifecyclePolicyViolation(f"An item named {name!r} already exists")
            item = Item(
                main_part_name=name,
                current_name=(current_name or name).strip(),
                revision_no=revision_no,
                item_type=item_type,
                material=material,
                drawing_no=drawing_no,
                company_id=self.ctx.company_id,
                process_state=ItemProcessState.NOT_IN_STOCK,
                holder_type=HolderType.NOT_IN_STOCK,
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            db.session.add(item)
            db.session.flush()
            logger.info(f"Item {item.id} registered: {item.main_part_name}")
        return item

    def change_process(self, item_id: int, new_name: str, new_revision: str,
                       change_type: str = 'ChangeProcess', reason: Optional[str] = None):
        """Rename / re-revision an item; the old values go to ItemChangeLog."""
        from custody.data.core.item_change_log import ItemChangeLog

        with atomic('item.change_process'):
            if not (new_name or '').strip():
                raise LifecyclePolicyViolation("new_name is required")
            item = self._lock_item(item_id)
            db.session.add(ItemChangeLog(
                item_id=item.id,
                change_type=change_type or ItemChangeLog.CHANGE_PROCESS,
                old_name=item.current_name,
                new_name=new_name.strip(),
                old_revision=item.revision_no,
                new_revision=new_revision,
                reason=reason,
                created_by_id=self.ctx.actor_id,
            ))
            item.current_name = new_name.strip()
            item.revision_no = new_revision
            item.touch(self.ctx.actor_id)
            self._sync([item])
            logger.info(f"Item {item.id} changed to {item.current_name} rev {item.revision_no}")
        return item

    def deactivate(self, item_id: int, reason: Optional[str] = None):
        """Soft-deactivate an item that no document currently claims."""
        from custody.data.core.item_change_log import ItemChangeLog

        with atomic('item.deactivate'):
            item = self._lock_item(item_id)
            ItemAvailabilityPolicy.check_no_active_claim(item.id, "deactivated")
            item.is_active = False
            item.touch(self.ctx.actor_id)
            db.session.add(ItemChangeLog(item_id=item.id, change_type=ItemChangeLog.DEACTIVATED,
                                         reason=reason, created_by_id=self.ctx.actor_id))
            self._sync([item])
            logger.info(f"Item {item.id} deactivated")
        return item

    def reset_to_not_in_stock(self, item_id: int, reason: Optional[str] = None):
        """
        Administrative correction: an In-Stock item is written off to
        NotInStock (no holder). Any other state is refused.
        """
        from custody.data.core.item_change_log import ItemChangeLog

        with atomic('item.reset'):
            item = self._lock_item(item_id)
            ItemAvailabilityPolicy.check_in_stock(item.id, "reset to not-in-stock")
            CustodyResolver.to_not_in_stock(item)
            item.touch(self.ctx.actor_id)
            db.session.add(ItemChangeLog(item_id=item.id, change_type=ItemChangeLog.RESET_TO_NOT_IN_STOCK,
                                         reason=reason, created_by_id=self.ctx.actor_id))
            self._sync([item])
            logger.info(f"Item {item.id} reset to NotInStock")
        return item
