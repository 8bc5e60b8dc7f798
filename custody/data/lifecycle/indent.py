from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import IndentStatus, IndentType


class Indent(UserCreatedBase):
    """Purchase indent - a request to procure / repair a set of items"""
    __tablename__ = 'indents'

    indent_no = db.Column(db.String(50), unique=True, nullable=False)
    indent_type = db.Column(db.String(20), nullable=False, default=IndentType.NEW)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    remarks = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=IndentStatus.PENDING)
    approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    items = db.relationship('IndentItem', back_populates='indent', cascade='all, delete-orphan',
                            order_by='IndentItem.id')
    approved_by = db.relationship('User', foreign_keys=[approved_by_id])

    @property
    def is_pending(self):
        return self.status == IndentStatus.PENDING

    @property
    def is_approved(self):
        return self.status == IndentStatus.APPROVED

    @property
    def is_rejected(self):
        return self.status == IndentStatus.REJECTED

    @property
    def item_ids(self):
        return [line.item_id for line in self.items]

    def to_dict(self, include_items=True):
        data = super().to_dict()
        if include_items:
            data['items'] = [line.to_dict() for line in self.items]
        return data

    def __repr__(self):
        return f'<Indent {self.indent_no} {self.status}>'


class IndentItem(UserCreatedBase):
    """One item requested on an indent"""
    __tablename__ = 'indent_items'

    indent_id = db.Column(db.Integer, db.ForeignKey('indents.id'), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    remarks = db.Column(db.Text, nullable=True)

    indent = db.relationship('Indent', back_populates='items')
    item = db.relationship('Item')

    def __repr__(self):
        return f'<IndentItem {self.id} indent={self.indent_id} item={self.item_id}>'
