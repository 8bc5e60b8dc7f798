from custody import db
from custody.data.core.user_created_base import UserCreatedBase
from custody.buisness.lifecycle.states import OrderStatus


class Order(UserCreatedBase):
    """Purchase order raised against approved indent items"""
    __tablename__ = 'orders'

    order_no = db.Column(db.String(50), unique=True, nullable=False)
    company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey('parties.id'), nullable=False)
    delivery_date = db.Column(db.Date, nullable=True)
    quotation_no = db.Column(db.String(100), nullable=True)
    remarks = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.PENDING)
    approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    items = db.relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                            order_by='OrderItem.id')
    vendor = db.relationship('Party')

    @property
    def is_pending(self):
        return self.status == OrderStatus.PENDING

    @property
    def is_approved(self):
        return self.status == OrderStatus.APPROVED

    @property
    def item_ids(self):
        """Items derivable from the order (through its indent items)."""
        return [line.indent_item.item_id for line in self.items]

    def to_dict(self, include_items=True):
        data = super().to_dict()
        if include_items:
            data['items'] = [line.to_dict() for line in self.items]
        return data

    def __repr__(self):
        return f'<Order {self.order_no} {self.status}>'


class OrderItem(UserCreatedBase):
    """Consumes one indent item; the item is reached through the indent item"""
    __tablename__ = 'order_items'

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    indent_item_id = db.Column(db.Integer, db.ForeignKey('indent_items.id'), nullable=False, index=True)
    rate = db.Column(db.Numeric(12, 2), nullable=True)

    order = db.relationship('Order', back_populates='items')
    indent_item = db.relationship('IndentItem')

    @property
    def item_id(self):
        return self.indent_item.item_id if self.indent_item else None

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        data = super().to_dict(include_relationships, include_audit_fields)
        data['item_id'] = self.item_id
        return data

    def __repr__(self):
        return f'<OrderItem {self.id} order={self.order_id} indent_item={self.indent_item_id}>'
