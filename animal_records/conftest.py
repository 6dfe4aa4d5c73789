# animal_records/conftest.py
import pytest

from animal_records import create_app
from animal_records.core.security import issue_access_token
from animal_records.models.user import CurrentUser
from animal_records.services.memory_backend import create_memory_backend

OWNER = CurrentUser(uid='owner-1', display_name='Jamie Rivera', email='jamie@example.com')
STRANGER = CurrentUser(uid='stranger-1', display_name='Someone Else', email='else@example.com')


@pytest.fixture
def backend():
    memory = create_memory_backend('test-bucket')
    memory.identity.register('owner-id-token', OWNER)
    memory.identity.register('stranger-id-token', STRANGER)
    return memory


@pytest.fixture
def app(backend):
    return create_app('testing', backend=backend)


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(app, user):
    with app.app_context():
        token = issue_access_token(user)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(app):
    return _headers(app, OWNER)


@pytest.fixture
def stranger_headers(app):
    return _headers(app, STRANGER)


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def buddy(client, auth_headers):
    """이름 'Buddy', 품종 없는 개 한 마리를 등록하고 응답 본문을 반환합니다."""
    response = client.post('/api/animals/', json={
        'name': 'Buddy',
        'species': 'dog',
        'sex': 'male',
        'date_of_birth': '2019-04-12',
    }, headers=auth_headers)
    assert response.status_code == 201
    return response.get_json()
