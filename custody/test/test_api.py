"""
JSON API: authentication, the permission gate, error bodies and a full
receive-and-inspect flow over HTTP.
"""
from custody.buisness.lifecycle.states import ItemProcessState


def test_missing_token_is_401(api, make_item):
    response = api.post('/indents', json={'item_ids': [make_item().id]})

    assert response.status_code == 401
    assert response.get_json() == {
        'success': False,
        'error': 'unauthenticated',
        'message': 'A valid bearer token is required',
    }


def test_bad_token_is_401(api, make_user):
    user, token = make_user('clerk', 'indent.create')
    api.token = f"{user.id}.not-the-secret"

    assert api.post('/indents', json={'item_ids': [1]}).status_code == 401

    api.token = 'garbage'
    assert api.post('/indents', json={'item_ids': [1]}).status_code == 401


def test_permission_checked_before_payload(api, make_user):
    _, token = make_user('viewer', 'lifecycle.view')
    api.token = token

    # Body is not even an object; the permission gate answers first
    response = api.client.post('/api/indents', data='[1, 2', headers=api.headers(),
                               content_type='application/json')

    assert response.status_code == 403
    body = response.get_json()
    assert body['success'] is False
    assert body['error'] == 'permission_denied'
    assert 'indent.create' in body['message']


def test_wildcard_permission(api, make_user, make_item):
    _, token = make_user('buyer', 'indent.*')
    api.token = token

    response = api.post('/indents', json={'item_ids': [make_item().id], 'remarks': 'urgent'})

    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['status'] == 'Pending'
    assert data['indent_no'].startswith('PI-')
    assert len(data['items']) == 1


def test_conflict_body_names_item_state(admin_api, make_item):
    item = make_item()
    assert admin_api.post('/indents', json={'item_ids': [item.id]}).status_code == 201

    response = admin_api.post('/indents', json={'item_ids': [item.id]})

    assert response.status_code == 409
    body = response.get_json()
    assert body['error'] == 'conflict'
    assert body['item_id'] == item.id
    assert body['current_state'] == ItemProcessState.IN_INDENT


def test_validation_errors(admin_api):
    response = admin_api.post('/indents', json={'item_ids': 'not-a-list'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'validation'

    response = admin_api.post('/movements/1/qc', json={})
    assert response.status_code == 400


def test_malformed_source_id_is_a_validation_error(admin_api, make_item):
    response = admin_api.post('/inwards', json={'lines': [{'item_id': make_item().id, 'order_id': 'abc'}]})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'validation'


def test_company_header_required(admin_api):
    admin_api.company_id = None
    response = admin_api.client.get('/api/items/states',
                                    headers={'Authorization': f'Bearer {admin_api.token}'})

    assert response.status_code == 400
    assert 'X-Company-Id' in response.get_json()['message']


def test_unknown_location_header(admin_api):
    response = admin_api.get('/items/states', location_id=9999)

    assert response.status_code == 404
    assert response.get_json()['error'] == 'not_found'


def test_receive_and_inspect_over_http(admin_api, make_item, org):
    item = make_item()

    response = admin_api.post('/inwards', json={'lines': [{'item_id': item.id}], 'remarks': 'Opening'})
    assert response.status_code == 201
    inward = response.get_json()['data']

    pending = admin_api.get('/inwards/pending-qc').get_json()['data']
    assert [row['item_id'] for row in pending] == [item.id]

    line_id = pending[0]['inward_line_id']
    response = admin_api.post('/qc', json={'inward_line_ids': [line_id]})
    assert response.status_code == 201
    entry = response.get_json()['data']
    assert entry['status'] == 'Pending'

    qc_item_id = entry['items'][0]['id']
    response = admin_api.post(f'/qc/items/{qc_item_id}/resolve', json={'resolution': 'Approved'})
    assert response.status_code == 200

    response = admin_api.post(f"/qc/{entry['id']}/approve", json={'remarks': 'Visual OK'})
    assert response.status_code == 200
    assert response.get_json()['data']['status'] == 'Approved'

    state = admin_api.get(f'/items/{item.id}/state').get_json()['data']
    assert state['state'] == ItemProcessState.IN_STOCK
    assert state['current_location_id'] == org['stores'].id

    listing = admin_api.get('/items/states?state=InStock').get_json()['data']
    assert [row['item_id'] for row in listing] == [item.id]

    document = admin_api.get(f"/inwards/{inward['id']}").get_json()['data']
    assert document['inward_no'] == inward['inward_no']


def test_documents_are_company_scoped(admin_api, db, make_item):
    from custody.data.core.organization import Company

    response = admin_api.post('/indents', json={'item_ids': [make_item().id]})
    indent_id = response.get_json()['data']['id']

    other = Company(name='Other Co')
    db.session.add(other)
    db.session.commit()
    admin_api.company_id = other.id

    response = admin_api.get(f'/indents/{indent_id}', location_id='')
    assert response.status_code == 404


def test_outward_and_movement_endpoints(admin_api, stocked_item, org):
    item = stocked_item()

    response = admin_api.post('/outwards', json={'party_id': org['vendor'].id,
                                                  'lines': [{'item_id': item.id}]})
    assert response.status_code == 201
    outward_id = response.get_json()['data']['id']

    response = admin_api.post('/movements', json={'movement_type': 'Receive', 'item_id': item.id})
    assert response.status_code == 201
    movement = response.get_json()['data']
    assert movement['outward_id'] == outward_id

    pending = admin_api.get('/movements/pending-qc').get_json()['data']
    assert [row['id'] for row in pending] == [movement['id']]

    response = admin_api.post(f"/movements/{movement['id']}/qc", json={'approved': True})
    assert response.status_code == 200
    assert admin_api.get(f'/items/{item.id}/state').get_json()['data']['state'] == ItemProcessState.IN_STOCK


def test_security_headers(admin_api):
    response = admin_api.get('/items/states')

    assert response.status_code == 200
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
