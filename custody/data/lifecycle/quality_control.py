from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import QCStatus, QCResolution


class QCEntry(UserCreatedBase):
    """Quality-control batch over inward lines at one location"""
    __tablename__ = 'qc_entries'

    qc_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=QCStatus.PENDING)
    remarks = db.Column(db.Text, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)
    decided_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)

    items = db.relationship('QCItem', back_populates='qc_entry', cascade='all, delete-orphan',
                            order_by='QCItem.id')

    @property
    def is_pending(self):
        return self.status == QCStatus.PENDING

    @property
    def unresolved_items(self):
        return [entry for entry in self.items if entry.resolution == QCResolution.UNRESOLVED]

    def to_dict(self, include_items=True):
        data = super().to_dict()
        if include_items:
            data['items'] = [entry.to_dict() for entry in self.items]
        return data

    def __repr__(self):
        return f'<QCEntry {self.qc_no} {self.status}>'


class QCItem(UserCreatedBase):
    """Inspection result for one inward line"""
    __tablename__ = 'qc_items'

    qc_entry_id = db.Column(db.Integer, db.ForeignKey('qc_entries.id'), nullable=False, index=True)
    inward_line_id = db.Column(db.Integer, db.ForeignKey('inward_lines.id'), nullable=False, index=True)
    resolution = db.Column(db.String(20), nullable=False, default=QCResolution.UNRESOLVED)
    remarks = db.Column(db.Text, nullable=True)

    qc_entry = db.relationship('QCEntry', back_populates='items')
    inward_line = db.relationship('InwardLine')

    @property
    def item_id(self):
        return self.inward_line.item_id if self.inward_line else None

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        data = super().to_dict(include_relationships, include_audit_fields)
        data['item_id'] = self.item_id
        return data

    def __repr__(self):
        return f'<QCItem {self.id} line={self.inward_line_id} {self.resolution}>'
