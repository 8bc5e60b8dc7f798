from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload, dict_list, optional_int, url_list
from custody.auth import permission_required, current_lifecycle_context, resolve_org_context
from custody.buisness.lifecycle.managers import InwardManager
from custody.services.lifecycle.selection_service import SelectionService


@api_bp.post('/inwards')
@permission_required('inward.create')
def create_inward():
    data = json_payload()
    ctx = current_lifecycle_context()
    inward = InwardManager(ctx).create(
        lines=dict_list(data, 'lines'),
        party_id=optional_int(data, 'party_id'),
        remarks=data.get('remarks'),
        attachment_urls=url_list(data),
    )
    return ok(inward.to_dict(), 201)


@api_bp.put('/inwards/<int:inward_id>')
@permission_required('inward.update')
def update_inward(inward_id):
    data = json_payload()
    ctx = current_lifecycle_context()
    inward = InwardManager(ctx).update(
        inward_id,
        lines=dict_list(data, 'lines', required=False),
        party_id=optional_int(data, 'party_id'),
        remarks=data.get('remarks'),
        attachment_urls=url_list(data),
    )
    return ok(inward.to_dict())


@api_bp.get('/inwards/pending-qc')
@permission_required('lifecycle.view')
def pending_qc_lines():
    org = resolve_org_context()
    return ok(SelectionService.pending_qc_lines(org.company_id, org.location_id))
