"""custody.services.lifecycle.item_state_service

Read-side queries for item states and custody. Nothing here writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from custody.buisness.lifecycle.state_engine import ItemStateEngine
from custody.buisness.lifecycle.states import ItemProcessState
from custody.buisness.lifecycle.errors import DocumentNotFound, LifecyclePolicyViolation
from custody.data.core.item import Item


@dataclass(frozen=True)
class ItemStateFilters:
    state: Optional[str] = None
    location_id: Optional[int] = None
    party_id: Optional[int] = None
    include_inactive: bool = False
    search_term: Optional[str] = None


class ItemStateService:
    """Item state listings backed by the derivation engine."""

    @staticmethod
    def parse_filters(args: Any) -> ItemStateFilters:
        """Parse filters from a Flask `request.args`-like mapping."""
        def _get_int(key: str) -> Optional[int]:
            raw = args.get(key)
            if raw in (None, ""):
                return None
            try:
                return int(raw)
            except (TypeError, ValueError):
                raise LifecyclePolicyViolation(f"{key} must be an integer")

        state = args.get('state') or None
        if state is not None and state not in ItemProcessState.ALL:
            raise LifecyclePolicyViolation(f"Unknown state: {state}")

        return ItemStateFilters(
            state=state,
            location_id=_get_int('location_id'),
            party_id=_get_int('party_id'),
            include_inactive=str(args.get('include_inactive', '')).lower() in ('1', 'true', 'yes'),
            search_term=(args.get('search') or '').strip() or None,
        )

    @staticmethod
    def describe_item(item: Item) -> Dict[str, Any]:
        claim = ItemStateEngine.find_claim(item.id)
        return {
            'item_id': item.id,
            'main_part_name': item.main_part_name,
            'current_name': item.current_name,
            'revision_no': item.revision_no,
            'state': claim.state,
            'state_label': ItemStateEngine.describe(claim.state),
            'cached_state': item.process_state,
            'claimed_by': {
                'doc_type': claim.doc_type,
                'doc_id': claim.doc_id,
                'doc_no': claim.doc_no,
            } if claim.doc_type else None,
            'holder_type': item.holder_type,
            'current_location_id': item.current_location_id,
            'current_party_id': item.current_party_id,
            'is_active': item.is_active,
        }

    @classmethod
    def get_item_state(cls, item_id: int, company_id: int) -> Dict[str, Any]:
        item = Item.query.filter_by(id=item_id, company_id=company_id).first()
        if item is None:
            raise DocumentNotFound('Item', item_id)
        return cls.describe_item(item)

    @classmethod
    def list_item_states(cls, company_id: int, filters: ItemStateFilters) -> List[Dict[str, Any]]:
        """
        List items with their derived state. The state filter is applied after
        each row is re-derived, so a drifted cached column never hides an item.
        """
        query = Item.query.filter(Item.company_id == company_id)
        if not filters.include_inactive:
            query = query.filter(Item.is_active.is_(True))
        if filters.location_id is not None:
            query = query.filter(Item.current_location_id == filters.location_id)
        if filters.party_id is not None:
            query = query.filter(Item.current_party_id == filters.party_id)
        if filters.search_term:
            like = f"%{filters.search_term}%"
            query = query.filter(Item.main_part_name.ilike(like) | Item.current_name.ilike(like))

        rows = [cls.describe_item(item) for item in query.order_by(Item.id).all()]
        if filters.state:
            rows = [row for row in rows if row['state'] == filters.state]
        return rows
