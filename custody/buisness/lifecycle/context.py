"""
Caller context passed into every lifecycle operation
"""

from dataclasses import dataclass
from typing import Optional
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation


@dataclass(frozen=True)
class OrgContext:
    """Company / location the request is scoped to."""
    company_id: int
    location_id: Optional[int] = None


@dataclass(frozen=True)
class LifecycleContext:
    """Who is acting, and in which company / location."""
    actor_id: Optional[int]
    org: OrgContext

    @property
    def company_id(self) -> int:
        return self.org.company_id

    @property
    def location_id(self) -> Optional[int]:
        return self.org.location_id

    def require_location(self) -> int:
        if self.org.location_id is None:
            raise LifecyclePolicyViolation("This operation requires a location context (X-Location-Id)")
        return self.org.location_id
