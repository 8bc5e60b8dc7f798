from custody import db
from custody.data.core.user_created_base import UserCreatedBase


class Outward(UserCreatedBase):
    """Dispatch of in-stock items to an external party"""
    __tablename__ = 'outwards'

    outward_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=False)
    remarks = db.Column(db.Text, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    lines = db.relationship('OutwardLine', back_populates='outward', cascade='all, delete-orphan',
                            order_by='OutwardLine.id')
    party = db.relationship('Party')

    @property
    def item_ids(self):
        return [line.item_id for line in self.lines]

    def to_dict(self, include_lines=True):
        data = super().to_dict()
        if include_lines:
            data['lines'] = [line.to_dict() for line in self.lines]
        return data

    def __repr__(self):
        return f'<Outward {self.outward_no}>'


class OutwardLine(UserCreatedBase):
    __tablename__ = 'outward_lines'

    outward_id = db.Column(db.Integer, db.ForeignKey('outwards.id'), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    remarks = db.Column(db.Text, nullable=True)

    outward = db.relationship('Outward', back_populates='lines')
    item = db.relationship('Item')

    def __repr__(self):
        return f'<OutwardLine {self.id} outward={self.outward_id} item={self.item_id}>'
