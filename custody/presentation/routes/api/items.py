from flask import request
from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload
from custody.auth import permission_required, current_lifecycle_context, resolve_org_context
from custody.buisness.lifecycle.managers import ItemManager
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.services.lifecycle.item_state_service import ItemStateService


@api_bp.get('/items/states')
@permission_required('lifecycle.view')
def item_states():
    org = resolve_org_context()
    filters = ItemStateService.parse_filters(request.args)
    return ok(ItemStateService.list_item_states(org.company_id, filters))


@api_bp.get('/items/<int:item_id>/state')
@permission_required('lifecycle.view')
def item_state(item_id):
    org = resolve_org_context()
    return ok(ItemStateService.get_item_state(item_id, org.company_id))


@api_bp.post('/items/<int:item_id>/change-process')
@permission_required('item.change')
def change_item_process(item_id):
    data = json_payload()
    new_name = data.get('new_name')
    new_revision = data.get('new_revision')
    if not new_name or new_revision in (None, ''):
        raise LifecyclePolicyViolation("new_name and new_revision are required")
    item = ItemManager(current_lifecycle_context()).change_process(
        item_id, new_name, str(new_revision),
        change_type=data.get('change_type') or 'ChangeProcess',
        reason=data.get('reason'),
    )
    return ok(item.to_dict())


@api_bp.post('/items/<int:item_id>/deactivate')
@permission_required('item.deactivate')
def deactivate_item(item_id):
    data = json_payload()
    item = ItemManager(current_lifecycle_context()).deactivate(item_id, reason=data.get('reason'))
    return ok(item.to_dict())


@api_bp.post('/items/<int:item_id>/reset')
@permission_required('item.reset')
def reset_item(item_id):
    data = json_payload()
    item = ItemManager(current_lifecycle_context()).reset_to_not_in_stock(item_id, reason=data.get('reason'))
    return ok(item.to_dict())
