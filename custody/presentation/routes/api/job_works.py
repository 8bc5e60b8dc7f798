from custody.presentation.routes.api import api_bp
from custody.presentation.routes.api.helpers import ok, json_payload, required_int, optional_int, url_list
from custody.auth import permission_required, current_lifecycle_context
from custody.buisness.lifecycle.managers import JobWorkManager


@api_bp.post('/job-works')
@permission_required('job_work.create')
def create_job_work():
    data = json_payload()
    ctx = current_lifecycle_context()
    job_work = JobWorkManager(ctx).create(
        item_id=required_int(data, 'item_id'),
        to_party_id=optional_int(data, 'to_party_id'),
        description=data.get('description'),
        attachment_urls=url_list(data),
    )
    return ok(job_work.to_dict(), 201)
