# animal_records/api/animals/test_routes.py
"""
반려동물 프로필 API 테스트

사용법: python -m pytest animal_records/api/animals/test_routes.py -v
"""

import io


def _audit_logs(client, headers, animal_id):
    response = client.get(f'/api/animals/{animal_id}/audit-logs', headers=headers)
    assert response.status_code == 200
    return response.get_json()['audit_logs']


def test_create_animal(client, auth_headers, buddy):
    assert buddy['name'] == 'Buddy'
    assert buddy['owner_id'] == 'owner-1'
    assert buddy['species'] == 'dog'
    assert buddy['breed'] is None
    assert buddy['date_of_birth'] == '2019-04-12'
    assert buddy['is_deceased'] is False

    logs = _audit_logs(client, auth_headers, buddy['id'])
    assert [(log['action'], log['summary']) for log in logs] == [('created', 'Created Buddy')]


def test_create_requires_login(client):
    response = client.post('/api/animals/', json={'name': 'Buddy'})
    assert response.status_code == 401


def test_create_validation_errors(client, auth_headers):
    base = {'name': 'Buddy', 'species': 'dog', 'sex': 'male', 'date_of_birth': '2019-04-12'}

    missing_name = client.post('/api/animals/', json={**base, 'name': ''}, headers=auth_headers)
    assert missing_name.status_code == 400
    assert 'name' in missing_name.get_json()['details']

    no_unit = client.post('/api/animals/', json={**base, 'weight': 12.5}, headers=auth_headers)
    assert no_unit.status_code == 400
    assert 'weight_unit' in no_unit.get_json()['details']

    died_before_birth = client.post(
        '/api/animals/', json={**base, 'date_of_death': '2018-01-01'}, headers=auth_headers,
    )
    assert died_before_birth.status_code == 400


def test_list_only_returns_own_animals(client, auth_headers, stranger_headers, buddy):
    client.post('/api/animals/', json={
        'name': 'Rex', 'species': 'dog', 'sex': 'male', 'date_of_birth': '2018-01-01',
    }, headers=stranger_headers)

    response = client.get('/api/animals/', headers=auth_headers)

    assert response.status_code == 200
    assert [a['name'] for a in response.get_json()['animals']] == ['Buddy']


def test_update_records_changed_fields(client, auth_headers, buddy):
    response = client.patch(f"/api/animals/{buddy['id']}", json={'color': 'brown'}, headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['color'] == 'brown'
    assert body['breed'] is None
    assert body['date_of_birth'] == '2019-04-12'

    updates = [log for log in _audit_logs(client, auth_headers, buddy['id']) if log['action'] == 'updated']
    assert len(updates) == 1
    assert 'color' in updates[0]['summary']
    assert updates[0]['changes'] == [{'field': 'color', 'old_value': None, 'new_value': 'brown'}]
    assert updates[0]['user_name'] == 'Jamie Rivera'


def test_update_without_changes_writes_no_audit_log(client, auth_headers, buddy):
    response = client.patch(
        f"/api/animals/{buddy['id']}", json={'name': 'Buddy', 'breed': None}, headers=auth_headers,
    )

    assert response.status_code == 200
    actions = [log['action'] for log in _audit_logs(client, auth_headers, buddy['id'])]
    assert actions == ['created']


def test_update_date_is_logged_as_iso_string(client, auth_headers, buddy):
    client.patch(f"/api/animals/{buddy['id']}", json={'date_of_birth': '2019-05-01'}, headers=auth_headers)

    updates = [log for log in _audit_logs(client, auth_headers, buddy['id']) if log['action'] == 'updated']
    change = updates[0]['changes'][0]
    assert change['field'] == 'date_of_birth'
    assert change['old_value'].startswith('2019-04-12')
    assert change['new_value'].startswith('2019-05-01')


def test_other_users_are_forbidden(client, stranger_headers, buddy):
    url = f"/api/animals/{buddy['id']}"

    assert client.get(url, headers=stranger_headers).status_code == 403
    assert client.patch(url, json={'color': 'black'}, headers=stranger_headers).status_code == 403
    assert client.delete(url, headers=stranger_headers).status_code == 403
    assert client.get(f"{url}/audit-logs", headers=stranger_headers).status_code == 403


def test_missing_animal_looks_forbidden(client, auth_headers):
    response = client.get('/api/animals/does-not-exist', headers=auth_headers)
    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'FORBIDDEN_OR_NOT_FOUND'


def test_delete_does_not_cascade(client, auth_headers, backend, buddy):
    client.post(f"/api/animals/{buddy['id']}/health-updates", json={
        'title': 'Annual checkup', 'date': '2024-03-01',
    }, headers=auth_headers)

    response = client.delete(f"/api/animals/{buddy['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert client.get(f"/api/animals/{buddy['id']}", headers=auth_headers).status_code == 403
    remaining = backend.documents.where_equal('health_updates', 'animal_id', buddy['id'])
    assert [doc['title'] for doc in remaining] == ['Annual checkup']
    actions = {doc['action'] for doc in backend.documents.where_equal('audit_logs', 'animal_id', buddy['id'])}
    assert {'created', 'health_added', 'deleted'} <= actions


def test_storage_failure_returns_message(client, auth_headers, backend, buddy, monkeypatch):
    def refuse(collection, doc_id, data):
        raise RuntimeError('permission denied')

    monkeypatch.setattr(backend.documents, 'update', refuse)

    response = client.patch(f"/api/animals/{buddy['id']}", json={'color': 'brown'}, headers=auth_headers)

    assert response.status_code == 500
    assert 'permission denied' in response.get_json()['message']


def _gallery_upload(client, headers, animal_id):
    response = client.post(f'/api/animals/{animal_id}/media', data={
        'file': (io.BytesIO(b'\xff\xd8\xff jpeg'), 'portrait.jpg', 'image/jpeg'),
    }, headers=headers, content_type='multipart/form-data')
    assert response.status_code == 201
    return response.get_json()


def test_profile_picture_must_be_own_upload(client, auth_headers, stranger_headers, backend, buddy):
    portrait = _gallery_upload(client, auth_headers, buddy['id'])
    rex = client.post('/api/animals/', json={
        'name': 'Rex', 'species': 'dog', 'sex': 'male', 'date_of_birth': '2020-01-01',
    }, headers=stranger_headers).get_json()

    created = client.post('/api/animals/', json={
        'name': 'Copycat', 'species': 'cat', 'sex': 'female', 'date_of_birth': '2020-01-01',
        'profile_picture': portrait['url'],
    }, headers=stranger_headers)
    patched = client.patch(f"/api/animals/{rex['id']}", json={'profile_picture': portrait['url']},
                           headers=stranger_headers)
    cleared = client.patch(f"/api/animals/{rex['id']}", json={'profile_picture': None}, headers=stranger_headers)

    assert created.status_code == 400
    assert patched.status_code == 400
    assert patched.get_json()['error_code'] == 'INVALID_PROFILE_PICTURE'
    assert cleared.status_code == 200
    assert portrait['storage_path'] in backend.blobs.blobs


def test_replacing_profile_picture_removes_own_old_file(client, auth_headers, backend, buddy):
    old = _gallery_upload(client, auth_headers, buddy['id'])
    client.patch(f"/api/animals/{buddy['id']}", json={'profile_picture': old['url']}, headers=auth_headers)

    response = client.patch(f"/api/animals/{buddy['id']}", json={'profile_picture': None}, headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()['profile_picture'] is None
    assert old['storage_path'] not in backend.blobs.blobs
