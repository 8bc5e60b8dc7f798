from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload, int_list, url_list
from custody.auth import permission_required, current_lifecycle_context
from custody.buisness.lifecycle.managers import QCManager
from custody.buisness.lifecycle.errors import LifecyclePolicyViolation


@api_bp.post('/qc')
@permission_required('qc.create')
def create_qc_entry():
    data = json_payload()
    ctx = current_lifecycle_context()
    entry = QCManager(ctx).create(
        inward_line_ids=int_list(data, 'inward_line_ids'),
        remarks=data.get('remarks'),
        attachment_urls=url_list(data),
    )
    return ok(entry.to_dict(), 201)


@api_bp.post('/qc/items/<int:qc_item_id>/resolve')
@permission_required('qc.resolve')
def resolve_qc_item(qc_item_id):
    data = json_payload()
    resolution = data.get('resolution')
    if not resolution:
        raise LifecyclePolicyViolation("resolution is required")
    qc_item = QCManager(current_lifecycle_context()).resolve_item(
        qc_item_id, resolution, remarks=data.get('remarks'))
    return ok(qc_item.to_dict())


@api_bp.post('/qc/<int:entry_id>/approve')
@permission_required('qc.approve')
def approve_qc_entry(entry_id):
    data = json_payload()
    entry = QCManager(current_lifecycle_context()).approve(entry_id, remarks=data.get('remarks'))
    return ok(entry.to_dict())


@api_bp.post('/qc/<int:entry_id>/reject')
@permission_required('qc.reject')
def reject_qc_entry(entry_id):
    data = json_payload()
    entry = QCManager(current_lifecycle_context()).reject(entry_id, remarks=data.get('remarks'))
    return ok(entry.to_dict())
