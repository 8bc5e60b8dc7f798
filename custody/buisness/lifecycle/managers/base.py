"""
Shared plumbing for lifecycle managers: document lookup, item row locks,
document numbering and the state-cache refresh.
"""

from typing import Iterable, List, Optional
from custody import db
from custody.buisness.lifecycle.context import LifecycleContext
from custody.buisness.lifecycle.errors import DocumentNotFound, LifecyclePolicyViolation
from custody.buisness.lifecycle.state_engine import ItemStateEngine


class LifecycleManager:
    """
    Base class for the per-document orchestrators.

    Public methods of subclasses are the unit of work: each opens atomic(),
    validates through the policies, writes, and re-syncs every touched item.
    """

    DOCUMENT_KIND = None

    def __init__(self, ctx: LifecycleContext):
        self.ctx = ctx

    def _get(self, model, doc_id, label: str):
        """Load a document in the caller's company or raise DocumentNotFound."""
        row = db.session.get(model, doc_id) if doc_id is not None else None
        if row is None:
            raise DocumentNotFound(label, doc_id)
        company_id = getattr(row, 'company_id', None)
        if company_id is not None and company_id != self.ctx.company_id:
            raise DocumentNotFound(label, doc_id)
        return row

    def _lock_items(self, item_ids: Iterable[int]) -> List:
        """
        Lock item rows (SELECT ... FOR UPDATE where supported) and reload them.

        Rows are locked in ascending id order; the result follows the
        request order.
        """
        from custody.data.core.item import Item

        ids = list(dict.fromkeys(int(i) for i in item_ids))
        if not ids:
            return []
        rows = (Item.query
                .filter(Item.id.in_(ids))
                .order_by(Item.id)
                .with_for_update()
                .populate_existing()
                .all())
        by_id = {row.id: row for row in rows}
        result = []
        for item_id in ids:
            item = by_id.get(item_id)
            if item is None or item.company_id != self.ctx.company_id:
                raise DocumentNotFound('Item', item_id)
            if not item.is_active:
                raise LifecyclePolicyViolation(f"Item {item_id} is inactive")
            result.append(item)
        return result

    def _lock_item(self, item_id: int):
        return self._lock_items([item_id])[0]

    def _next_code(self, location_id: Optional[int] = None) -> str:
        from flask import current_app
        from custody.data.core.sequences import DocumentNumberGenerator

        prefix = DocumentNumberGenerator.PREFIXES[self.DOCUMENT_KIND]
        if not current_app.config.get('DOCUMENT_CODE_PER_LOCATION', True):
            location_id = None
        return DocumentNumberGenerator.generate_code(prefix, location_id)

    @staticmethod
    def _sync(items: Iterable) -> None:
        db.session.flush()
        for item in items:
            ItemStateEngine.sync(item)
        db.session.flush()

    def _require_location(self) -> int:
        """Caller's location id, verified to belong to the caller's company."""
        from custody.data.core.organization import Location

        location_id = self.ctx.require_location()
        location = db.session.get(Location, location_id)
        if location is None or location.company_id != self.ctx.company_id or not location.is_active:
            raise DocumentNotFound('Location', location_id)
        return location_id

    def _party(self, party_id: Optional[int], required: bool = True):
        from custody.data.core.organization import Party

        if party_id is None:
            if required:
                raise LifecyclePolicyViolation("A party is required")
            return None
        party = db.session.get(Party, int(party_id))
        if party is None or not party.is_active:
            raise DocumentNotFound('Party', party_id)
        if party.company_id is not None and party.company_id != self.ctx.company_id:
            raise DocumentNotFound('Party', party_id)
        return party
