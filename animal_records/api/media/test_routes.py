# animal_records/api/media/test_routes.py
import io

from animal_records.api.media.services import build_storage_path, classify_media
from animal_records.models.media import MediaType


def _upload(client, headers, animal_id, content=b'\xff\xd8\xff fake jpeg', name='beach.JPG',
            mime='image/jpeg', **form):
    return client.post(
        f'/api/animals/{animal_id}/media',
        data={'file': (io.BytesIO(content), name, mime), **form},
        headers=headers, content_type='multipart/form-data',
    )


def test_classify_media():
    assert classify_media('image/png') is MediaType.PHOTO
    assert classify_media('video/quicktime') is MediaType.VIDEO
    assert classify_media('application/pdf') is MediaType.DOCUMENT
    assert classify_media('application/zip') is None


def test_build_storage_path():
    assert build_storage_path('u1', 'a1', 'f.jpg') == 'animal-media/u1/a1/f.jpg'
    assert build_storage_path('u1', 'a1', 'f.jpg', 'h1') == 'health-update-media/u1/a1/h1/f.jpg'


def test_upload_to_gallery(client, auth_headers, backend, buddy):
    response = _upload(client, auth_headers, buddy['id'], caption='At the beach', tags='beach, summer')

    assert response.status_code == 201
    media = response.get_json()
    assert media['kind'] == 'animal'
    assert media['type'] == 'photo'
    assert media['category'] == 'gallery'
    assert media['original_name'] == 'beach.JPG'
    assert media['file_name'].endswith('.jpg')
    assert media['tags'] == ['beach', 'summer']
    assert media['storage_path'] == f"animal-media/owner-1/{buddy['id']}/{media['file_name']}"
    assert backend.blobs.blobs[media['storage_path']] == (b'\xff\xd8\xff fake jpeg', 'image/jpeg')
    assert media['url'].startswith('https://storage.googleapis.com/test-bucket/')

    logs = backend.documents.where_equal('audit_logs', 'action', 'media_added')
    assert logs[0]['summary'] == 'Added media: beach.JPG'

    listed = client.get(f"/api/animals/{buddy['id']}/media", headers=auth_headers).get_json()['media']
    assert [m['id'] for m in listed] == [media['id']]


def test_rejects_unsupported_or_empty_files(client, auth_headers, backend, buddy):
    unsupported = _upload(client, auth_headers, buddy['id'], content=b'PK', name='a.zip', mime='application/zip')
    assert unsupported.status_code == 400
    assert unsupported.get_json()['error_code'] == 'INVALID_FILE'

    empty = _upload(client, auth_headers, buddy['id'], content=b'')
    assert empty.status_code == 400

    assert backend.blobs.blobs == {}


def test_rejects_oversized_file(client, auth_headers, app, buddy):
    app.services['media'].max_file_size = 4

    response = _upload(client, auth_headers, buddy['id'], content=b'12345')

    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_FILE'


def test_upload_requires_file(client, auth_headers, buddy):
    response = client.post(
        f"/api/animals/{buddy['id']}/media", data={'caption': 'no file'},
        headers=auth_headers, content_type='multipart/form-data',
    )
    assert response.status_code == 400


def test_attach_to_saved_health_update_and_delete(client, auth_headers, backend, buddy):
    update = client.post(f"/api/animals/{buddy['id']}/health-updates", json={
        'title': 'X-ray', 'date': '2024-03-01',
    }, headers=auth_headers).get_json()

    response = _upload(
        client, auth_headers, buddy['id'], name='xray.png', mime='image/png',
        health_update_id=update['id'], category='xray',
    )
    assert response.status_code == 201
    media = response.get_json()
    assert media['kind'] == 'health_update'
    assert media['storage_path'].startswith(f"health-update-media/owner-1/{buddy['id']}/{update['id']}/")
    assert [m['id'] for m in backend.documents.get('health_updates', update['id'])['media']] == [media['id']]

    deleted = client.delete(
        f"/api/animals/{buddy['id']}/media/{media['id']}?health_update_id={update['id']}", headers=auth_headers,
    )

    assert deleted.status_code == 204
    assert backend.documents.get('health_updates', update['id'])['media'] == []
    assert media['storage_path'] not in backend.blobs.blobs


def test_delete_gallery_media(client, auth_headers, backend, buddy):
    media = _upload(client, auth_headers, buddy['id']).get_json()

    response = client.delete(f"/api/animals/{buddy['id']}/media/{media['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert backend.documents.get('animal_media', media['id']) is None
    assert backend.blobs.blobs == {}
    logs = backend.documents.where_equal('audit_logs', 'action', 'media_deleted')
    assert logs[0]['summary'] == 'Deleted media: beach.JPG'


def test_delete_continues_when_file_is_already_gone(client, auth_headers, backend, buddy):
    media = _upload(client, auth_headers, buddy['id']).get_json()
    backend.blobs.blobs.clear()

    response = client.delete(f"/api/animals/{buddy['id']}/media/{media['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert backend.documents.get('animal_media', media['id']) is None


def test_stranger_cannot_upload_or_delete(client, auth_headers, stranger_headers, buddy):
    assert _upload(client, stranger_headers, buddy['id']).status_code == 403

    media = _upload(client, auth_headers, buddy['id']).get_json()
    response = client.delete(f"/api/animals/{buddy['id']}/media/{media['id']}", headers=stranger_headers)
    assert response.status_code == 403
