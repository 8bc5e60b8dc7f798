from custody import db
from custody.data.core.user_created_base import UserCreatedBase


class Inward(UserCreatedBase):
    """Receipt of items into a location; every line then waits for QC"""
    __tablename__ = 'inwards'

    inward_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=True)
    remarks = db.Column(db.Text, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    lines = db.relationship('InwardLine', back_populates='inward', cascade='all, delete-orphan',
                            order_by='InwardLine.id')
    location = db.relationship('Location')
    party = db.relationship('Party')

    def to_dict(self, include_lines=True):
        data = super().to_dict()
        if include_lines:
            data['lines'] = [line.to_dict() for line in self.lines]
        return data

    def __repr__(self):
        return f'<Inward {self.inward_no}>'


class InwardLine(UserCreatedBase):
    """
    One received item.

    source_type/source_ref_id point at the Order, JobWork or Outward the
    item came back from; both null means opening stock. The from_* columns
    keep the item's holder from before the inward so the line can be undone.
    """
    __tablename__ = 'inward_lines'

    inward_id = db.Column(db.Integer, db.ForeignKey('inwards.id'), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    source_type = db.Column(db.String(20), nullable=True)
    source_ref_id = db.Column(db.Integer, nullable=True)
    remarks = db.Column(db.Text, nullable=True)

    is_qc_pending = db.Column(db.Boolean, default=True, nullable=False)
    is_qc_approved = db.Column(db.Boolean, default=False, nullable=False)

    from_holder_type = db.Column(db.String(20), nullable=True)
    from_location_id = db.Column(db.Integer, nullable=True)
    from_party_id = db.Column(db.Integer, nullable=True)

    inward = db.relationship('Inward', back_populates='lines')
    item = db.relationship('Item')

    @property
    def source_ref(self):
        from custody.buisness.lifecycle.source_ref import SourceRef
        return SourceRef.from_columns(self.source_type, self.source_ref_id)

    def __repr__(self):
        return f'<InwardLine {self.id} item={self.item_id} source={self.source_type}:{self.source_ref_id}>'
