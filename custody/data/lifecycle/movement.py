from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import MovementType


class Movement(UserCreatedBase):
    """
    Ad-hoc custody transfer between a location and a party.

    Issue flips the holder immediately. Receive and SystemReturn wait for a
    QC decision (is_qc_pending) before the item lands at the destination.
    """
    __tablename__ = 'movements'

    movement_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    movement_type = db.Column(db.String(20), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)

    from_holder_type = db.Column(db.String(20), nullable=False)
    from_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    from_party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=True)
    to_holder_type = db.Column(db.String(20), nullable=False)
    to_location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    to_party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=True)

    reason = db.Column(db.Text, nullable=True)
    remarks = db.Column(db.Text, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)

    is_qc_pending = db.Column(db.Boolean, default=False, nullable=False)
    is_qc_approved = db.Column(db.Boolean, nullable=True)
    qc_remarks = db.Column(db.Text, nullable=True)
    qc_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    qc_at = db.Column(db.DateTime, nullable=True)

    # Outward document this returning movement closes, if any
    outward_id = db.Column(db.Integer, db.ForeignKey('outwards.id'), nullable=True, index=True)

    item = db.relationship('Item')

    @property
    def is_returning(self):
        return self.movement_type in MovementType.RETURNING

    def __repr__(self):
        return f'<Movement {self.movement_no} {self.movement_type} item={self.item_id}>'
