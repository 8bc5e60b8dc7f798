from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import (
    ok, json_payload, required_int, optional_int, optional_bool, url_list,
)
from custody.auth import permission_required, current_lifecycle_context, resolve_org_context
from custody.buisness.lifecycle.managers import MovementManager
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation
from custody.services.lifecycle.selection_service import SelectionService


@api_bp.post('/movements')
@permission_required('movement.create')
def create_movement():
    data = json_payload()
    movement_type = data.get('movement_type')
    if not movement_type:
        raise LifecyclePolicyViolation("movement_type is required")
    ctx = current_lifecycle_context()
    movement = MovementManager(ctx).create(
        movement_type=movement_type,
        item_id=required_int(data, 'item_id'),
        to_party_id=optional_int(data, 'to_party_id'),
        to_location_id=optional_int(data, 'to_location_id'),
        reason=data.get('reason'),
        remarks=data.get('remarks'),
        attachment_urls=url_list(data),
    )
    return ok(movement.to_dict(), 201)


@api_bp.post('/movements/<int:movement_id>/qc')
@permission_required('movement.qc')
def resolve_movement_qc(movement_id):
    data = json_payload()
    approved = optional_bool(data, 'approved')
    if approved is None:
        raise LifecyclePolicyViolation("approved is required")
    movement = MovementManager(current_lifecycle_context()).resolve_qc(
        movement_id, approved, remarks=data.get('remarks'))
    return ok(movement.to_dict())


@api_bp.get('/movements/pending-qc')
@permission_required('lifecycle.view')
def pending_qc_movements():
    org = resolve_org_context()
    return ok(SelectionService.pending_qc_movements(org.company_id, org.location_id))
