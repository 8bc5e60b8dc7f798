from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import ItemProcessState, HolderType


class Item(UserCreatedBase):
    """
    A trackable physical asset (tool, die, pattern...).

    `process_state` is a cache of the state derived from the document tables
    and is rewritten by every lifecycle operation. The holder columns record
    who physically has the item:

        Location   -> current_location_id set, current_party_id null
        Vendor     -> current_party_id set, current_location_id null
        NotInStock -> both null
    """
    __tablename__ = 'items'

    main_part_name = db.Column(db.String(200), nullable=False)
    current_name = db.Column(db.String(200), nullable=False)
    revision_no = db.Column(db.String(50), default='0')
    item_type = db.Column(db.String(100), nullable=True)
    material = db.Column(db.String(100), nullable=True)
    drawing_no = db.Column(db.String(100), nullable=True)

    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)

    process_state = db.Column(db.String(20), nullable=False, default=ItemProcessState.NOT_IN_STOCK)
    holder_type = db.Column(db.String(20), nullable=False, default=HolderType.NOT_IN_STOCK)
    current_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    current_party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=True)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    version_id = db.Column(db.Integer, nullable=False)

    company = db.relationship('Company')
    current_location = db.relationship('Location', foreign_keys=[current_location_id])
    current_party = db.relationship('Party', foreign_keys=[current_party_id])

    __mapper_args__ = {
        'version_id_col': version_id,
    }

    __table_args__ = (
        db.UniqueConstraint('company_id', 'main_part_name', name='uq_item_company_main_part'),
    )

    def holder_snapshot(self):
        """Current holder as a plain dict (stored on document lines for unwinding)."""
        return {
            'holder_type': self.holder_type,
            'location_id': self.current_location_id,
            'party_id': self.current_party_id,
        }

    def holder_is_consistent(self):
        if self.holder_type == HolderType.LOCATION:
            return self.current_location_id is not None and self.current_party_id is None
        if self.holder_type == HolderType.VENDOR:
            return self.current_party_id is not None and self.current_location_id is None
        if self.holder_type == HolderType.NOT_IN_STOCK:
            return self.current_location_id is None and self.current_party_id is None
        return False

    @property
    def display_name(self):
        return f"{self.current_name} (rev {self.revision_no})"

    def __repr__(self):
        return f'<Item {self.id} {self.main_part_name} {self.process_state}>'
