from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import JobWorkStatus


class JobWork(UserCreatedBase):
    """Single-item job work; completed when the item is inwarded back"""
    __tablename__ = 'job_works'

    job_work_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    to_party_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=True)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=JobWorkStatus.PENDING)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)

    item = db.relationship('Item')
    to_party = db.relationship('Party')

    @property
    def is_pending(self):
        return self.status == JobWorkStatus.PENDING

    def __repr__(self):
        return f'<JobWork {self.job_work_no} {self.status}>'
