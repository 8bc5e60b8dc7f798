from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload, dict_list, required_int, url_list
from custody.auth import permission_required, current_lifecycle_context
from custody.buisness.lifecycle.managers import OutwardManager


@api_bp.post('/outwards')
@permission_required('outward.create')
def create_outward():
    data = json_payload()
    ctx = current_lifecycle_context()
    outward = OutwardManager(ctx).create(
        party_id=required_int(data, 'party_id'),
        lines=dict_list(data, 'lines'),
        remarks=data.get('remarks'),
        attachment_urls=url_list(data),
    )
    return ok(outward.to_dict(), 201)
