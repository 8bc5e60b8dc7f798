from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok
from custody.auth import permission_required, resolve_org_context
from custody.buisness.lifecycle.errors import DocumentNotFound


def _document_models():
    from custody.data.lifecycle.indent import Indent
    from custody.data.lifecycle.order import Order
    from custody.data.lifecycle.inward import Inward
    from custody.data.lifecycle.quality_control import QCEntry
    from custody.data.lifecycle.job_work import JobWork
    from custody.data.lifecycle.outward import Outward
    from custody.data.lifecycle.movement import Movement

    return {
        'indents': (Indent, 'Indent'),
        'orders': (Order, 'Order'),
        'inwards': (Inward, 'Inward'),
        'qc': (QCEntry, 'QC entry'),
        'job-works': (JobWork, 'Job work'),
        'outwards': (Outward, 'Outward'),
        'movements': (Movement, 'Movement'),
    }


@api_bp.get('/<doc_type>/<int:doc_id>')
@permission_required('lifecycle.view')
def get_document(doc_type, doc_id):
    models = _document_models()
    if doc_type not in models:
        raise DocumentNotFound('Document type', doc_type)
    model, label = models[doc_type]
    org = resolve_org_context()
    row = model.query.filter_by(id=doc_id, company_id=org.company_id).first()
    if row is None:
        raise DocumentNotFound(label, doc_id)
    return ok(row.to_dict())
