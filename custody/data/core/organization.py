"""
Reference rows the lifecycle documents point at.
Master-data maintenance happens elsewhere; these tables only carry what
custody and scoping need.
"""

from custody import db
from custody.data.core.user_created_base import UserCreatedBase


class Company(UserCreatedBase):
    __tablename__ = 'companies'

    name = db.Column(db.String(150), unique=True, nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Company {self.name}>'


class Location(UserCreatedBase):
    """A stores/plant location that can hold items."""
    __tablename__ = 'locations'

    name = db.Column(db.String(150), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    company = db.relationship('Company')

    __table_args__ = (
        db.UniqueConstraint('company_id', 'name', name='uq_location_company_name'),
    )

    def __repr__(self):
        return f'<Location {self.name}>'


class Party(UserCreatedBase):
    """External vendor/contractor that can hold items."""
    __tablename__ = 'parties'

    name = db.Column(db.String(150), nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=True)
    party_type = db.Column(db.String(50), default='Vendor')
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Party {self.name}>'
