"""
Tagged source reference of an inward line.

An inward line is sourced from exactly one of: an Order, a Job Work, or an
Outward (the item coming back). No source means opening stock.
"""

from dataclasses import dataclass
from typing import Optional, Union
from custody.buisness.lifecycle.states import SourceType
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation


@dataclass(frozen=True)
class OrderSource:
    order_id: int
    source_type = SourceType.ORDER

    @property
    def ref_id(self) -> int:
        return self.order_id


@dataclass(frozen=True)
class JobWorkSource:
    job_work_id: int
    source_type = SourceType.JOB_WORK

    @property
    def ref_id(self) -> int:
        return self.job_work_id


@dataclass(frozen=True)
class OutwardReturnSource:
    outward_id: int
    source_type = SourceType.OUTWARD_RETURN

    @property
    def ref_id(self) -> int:
        return self.outward_id


AnySource = Union[OrderSource, JobWorkSource, OutwardReturnSource]


class SourceRef:
    """Conversions between the tagged union and the (type, id) column pair."""

    _BY_TYPE = {
        SourceType.ORDER: OrderSource,
        SourceType.JOB_WORK: JobWorkSource,
        SourceType.OUTWARD_RETURN: OutwardReturnSource,
    }

    @classmethod
    def from_columns(cls, source_type: Optional[str], ref_id: Optional[int]) -> Optional[AnySource]:
        if source_type is None and ref_id is None:
            return None
        if source_type not in cls._BY_TYPE:
            raise LifecyclePolicyViolation(f"Unknown source type: {source_type!r}")
        if ref_id is None:
            raise LifecyclePolicyViolation(f"Source type {source_type} requires a reference id")
        return cls._BY_TYPE[source_type](cls._ref_id(ref_id, 'source_ref_id'))

    @classmethod
    def from_payload(cls, data: dict) -> Optional[AnySource]:
        """
        Parse the source of an inward line payload.

        Accepts {"source_type": "Order", "source_ref_id": 4} or the shorthand
        keys order_id / job_work_id / outward_id (at most one).
        """
        if data.get('source_type') or data.get('source_ref_id'):
            return cls.from_columns(data.get('source_type'), data.get('source_ref_id'))

        given = [(key, data[key]) for key in ('order_id', 'job_work_id', 'outward_id') if data.get(key)]
        if not given:
            return None
        if len(given) > 1:
            raise LifecyclePolicyViolation("An inward line may reference only one source")
        key, value = given[0]
        if key == 'order_id':
            return OrderSource(cls._ref_id(value, key))
        if key == 'job_work_id':
            return JobWorkSource(cls._ref_id(value, key))
        return OutwardReturnSource(cls._ref_id(value, key))

    @staticmethod
    def _ref_id(value, label: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise LifecyclePolicyViolation(f"{label} must be an integer id, got {value!r}")

    @staticmethod
    def to_columns(source: Optional[AnySource]):
        if source is None:
            return None, None
        return source.source_type, source.ref_id
