from custody import db
from custody.data.core.user_created_base import UserCreatedBase


class ItemChangeLog(UserCreatedBase):
    """Audit row for name / revision changes and administrative custody resets."""
    __tablename__ = 'item_change_logs'

    CHANGE_PROCESS = 'ChangeProcess'
    RESET_TO_NOT_IN_STOCK = 'ResetToNotInStock'
    DEACTIVATED = 'Deactivated'

    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    change_type = db.Column(db.String(40), nullable=False)
    old_name = db.Column(db.String(200), nullable=True)
    new_name = db.Column(db.String(200), nullable=True)
    old_revision = db.Column(db.String(50), nullable=True)
    new_revision = db.Column(db.String(50), nullable=True)
    reason = db.Column(db.Text, nullable=True)

    item = db.relationship('Item')

    def __repr__(self):
        return f'<ItemChangeLog item={self.item_id} {self.change_type}>'
