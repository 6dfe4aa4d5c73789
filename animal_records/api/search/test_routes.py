# animal_records/api/search/test_routes.py
import io


def test_animal_search_finds_color(client, auth_headers, buddy):
    client.patch(f"/api/animals/{buddy['id']}", json={'color': 'brown'}, headers=auth_headers)

    response = client.get(f"/api/animals/{buddy['id']}/search?q=brown&types=animal", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['query'] == 'brown'
    assert [r['id'] for r in body['results']] == [f"animal_{buddy['id']}"]
    assert 'color' in body['results'][0]['matched_fields']
    assert body['results'][0]['source']['color'] == 'brown'


def test_animal_search_covers_every_record_type(client, auth_headers, buddy):
    client.patch(f"/api/animals/{buddy['id']}", json={'color': 'brown'}, headers=auth_headers)
    client.post(f"/api/animals/{buddy['id']}/health-updates", json={
        'title': 'Checkup', 'date': '2024-03-01', 'veterinarian': 'Dr. Brown',
    }, headers=auth_headers)
    client.post(f"/api/animals/{buddy['id']}/media", data={
        'file': (io.BytesIO(b'jpeg'), 'pic.jpg', 'image/jpeg'), 'caption': 'Brown leaves',
    }, headers=auth_headers, content_type='multipart/form-data')

    results = client.get(f"/api/animals/{buddy['id']}/search?q=brown", headers=auth_headers).get_json()['results']

    assert {r['type'] for r in results} == {'animal', 'health_update', 'media'}
    assert [r['relevance'] for r in results] == sorted((r['relevance'] for r in results), reverse=True)
    assert all(r['animal_name'] == 'Buddy' for r in results)


def test_audit_logs_are_searchable(client, auth_headers, buddy):
    client.patch(f"/api/animals/{buddy['id']}", json={'color': 'brown'}, headers=auth_headers)

    results = client.get(
        f"/api/animals/{buddy['id']}/search", query_string={'q': 'updated color', 'types': 'audit_log'},
        headers=auth_headers,
    ).get_json()['results']

    assert [r['title'] for r in results] == ['Updated color']
    assert results[0]['source']['changes'][0]['field'] == 'color'


def test_dashboard_search_spans_all_animals(client, auth_headers, stranger_headers, buddy):
    client.post('/api/animals/', json={
        'name': 'Buddy Two', 'species': 'cat', 'sex': 'female', 'date_of_birth': '2021-01-01',
    }, headers=auth_headers)
    client.post('/api/animals/', json={
        'name': 'Buddy Elsewhere', 'species': 'dog', 'sex': 'male', 'date_of_birth': '2021-01-01',
    }, headers=stranger_headers)

    response = client.get('/api/search?q=buddy&types=animal', headers=auth_headers)

    assert response.status_code == 200
    assert sorted(r['title'] for r in response.get_json()['results']) == ['Buddy', 'Buddy Two']


def test_blank_query_and_date_filters(client, auth_headers, buddy):
    client.post(f"/api/animals/{buddy['id']}/health-updates", json={
        'title': 'Spring checkup', 'date': '2024-03-01',
    }, headers=auth_headers)
    url = f"/api/animals/{buddy['id']}/search"

    assert client.get(f'{url}?q=', headers=auth_headers).get_json()['results'] == []

    on_day = client.get(
        f'{url}?q=spring&types=health_update&start_date=2024-03-01&end_date=2024-03-01', headers=auth_headers,
    )
    assert [r['title'] for r in on_day.get_json()['results']] == ['Spring checkup']

    later = client.get(f'{url}?q=spring&types=health_update&start_date=2024-03-02', headers=auth_headers)
    assert later.get_json()['results'] == []


def test_invalid_search_parameters(client, auth_headers, buddy):
    url = f"/api/animals/{buddy['id']}/search"

    assert client.get(f'{url}?q=x&types=animal,unknown', headers=auth_headers).status_code == 400
    assert client.get(
        f'{url}?q=x&start_date=2024-03-02&end_date=2024-03-01', headers=auth_headers,
    ).status_code == 400


def test_animal_search_is_owner_only(client, stranger_headers, buddy):
    response = client.get(f"/api/animals/{buddy['id']}/search?q=buddy", headers=stranger_headers)
    assert response.status_code == 403
