from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import (
    ok, json_payload, dict_list, required_int, optional_int, optional_date,
)
from custody.auth import permission_required, current_lifecycle_context
from custody.buisness.lifecycle.managers import OrderManager


@api_bp.post('/orders')
@permission_required('order.create')
def create_order():
    data = json_payload()
    ctx = current_lifecycle_context()
    order = OrderManager(ctx).create(
        vendor_id=required_int(data, 'vendor_id'),
        lines=dict_list(data, 'items'),
        delivery_date=optional_date(data, 'delivery_date'),
        quotation_no=data.get('quotation_no'),
        remarks=data.get('remarks'),
    )
    return ok(order.to_dict(), 201)


@api_bp.put('/orders/<int:order_id>')
@permission_required('order.update')
def update_order(order_id):
    data = json_payload()
    ctx = current_lifecycle_context()
    order = OrderManager(ctx).update(
        order_id,
        lines=dict_list(data, 'items', required=False),
        vendor_id=optional_int(data, 'vendor_id'),
        delivery_date=optional_date(data, 'delivery_date'),
        quotation_no=data.get('quotation_no'),
        remarks=data.get('remarks'),
    )
    return ok(order.to_dict())


@api_bp.post('/orders/<int:order_id>/approve')
@permission_required('order.approve')
def approve_order(order_id):
    order = OrderManager(current_lifecycle_context()).approve(order_id)
    return ok(order.to_dict())


@api_bp.post('/orders/<int:order_id>/deactivate')
@permission_required('order.deactivate')
def deactivate_order(order_id):
    order = OrderManager(current_lifecycle_context()).deactivate(order_id)
    return ok(order.to_dict())
