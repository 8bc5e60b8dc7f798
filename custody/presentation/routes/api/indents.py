from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload, int_list
from custody.auth import permission_required, current_lifecycle_context, resolve_org_context
from custody.buisness.lifecycle.managers import IndentManager
from custody.buisness.lifecycle.states import IndentType
from custody.services.lifecycle.selection_service import SelectionService


@api_bp.post('/indents')
@permission_required('indent.create')
def create_indent():
    data = json_payload()
    ctx = current_lifecycle_context()
    indent = IndentManager(ctx).create(
        item_ids=int_list(data, 'item_ids'),
        indent_type=data.get('indent_type') or IndentType.NEW,
        remarks=data.get('remarks'),
    )
    return ok(indent.to_dict(), 201)


@api_bp.put('/indents/<int:indent_id>')
@permission_required('indent.update')
def update_indent(indent_id):
    data = json_payload()
    ctx = current_lifecycle_context()
    indent = IndentManager(ctx).update(
        indent_id,
        item_ids=int_list(data, 'item_ids', required=False),
        indent_type=data.get('indent_type'),
        remarks=data.get('remarks'),
    )
    return ok(indent.to_dict())


@api_bp.post('/indents/<int:indent_id>/approve')
@permission_required('indent.approve')
def approve_indent(indent_id):
    indent = IndentManager(current_lifecycle_context()).approve(indent_id)
    return ok(indent.to_dict())


@api_bp.post('/indents/<int:indent_id>/reject')
@permission_required('indent.reject')
def reject_indent(indent_id):
    data = json_payload()
    indent = IndentManager(current_lifecycle_context()).reject(indent_id, remarks=data.get('remarks'))
    return ok(indent.to_dict())


@api_bp.post('/indents/<int:indent_id>/revert')
@permission_required('indent.revert')
def revert_indent(indent_id):
    indent = IndentManager(current_lifecycle_context()).revert(indent_id)
    return ok(indent.to_dict())


@api_bp.get('/indents/pending-items')
@permission_required('lifecycle.view')
def pending_indent_items():
    org = resolve_org_context()
    return ok(SelectionService.pending_indent_items(org.company_id))
