"""
JobWorkManager - send one in-stock item for job work
"""

from typing import Optional, List
from custody import db
from custody.buisness.core.unit_of_work import atomic
from custody.buisness.lifecycle.managers.base import LifecycleManager
from custody.buisness.lifecycle.states import JobWorkStatus
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.buisness.lifecycle.policies import ItemAvailabilityPolicy
from custody.utils.logger import get_logger

logger = get_logger("custody.lifecycle.job_work")


class JobWorkManager(LifecycleManager):
    """Custody does not change here; the job work completes when the item is inwarded back."""

    DOCUMENT_KIND = 'job_work'

    def create(self, item_id: int, to_party_id: Optional[int] = None,
               description: Optional[str] = None, attachment_urls: Optional[List[str]] = None):
        from custody.data.lifecycle.job_work import JobWork

        with atomic('job_work.create'):
            location_id = self._require_location()
            if to_party_id is not None:
                self._party(to_party_id)
            item = self._lock_item(item_id)
            ItemAvailabilityPolicy.check_in_stock(item.id, "sent on job work")
            if item.current_location_id != location_id:
                raise LifecyclePolicyViolation(f"Item {item.id} is not held at location {location_id}")

            job_work = JobWork(
                job_work_no=self._next_code(location_id),
                company_id=self.ctx.company_id,
                item_id=item.id,
                location_id=location_id,
                to_party_id=to_party_id,
                description=description,
                status=JobWorkStatus.PENDING,
                attachment_urls=list(attachment_urls or []),
                created_by_id=self.ctx.actor_id,
                updated_by_id=self.ctx.actor_id,
            )
            db.session.add(job_work)

            self._sync([item])
            logger.info(f"Job work {job_work.job_work_no} created for item {item.id}")
        return job_work
