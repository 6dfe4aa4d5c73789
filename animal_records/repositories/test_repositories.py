# animal_records/repositories/test_repositories.py
"""
저장소 계층 테스트 (인메모리 백엔드 사용)

사용법: python -m pytest animal_records/repositories/test_repositories.py -v
"""

import io
from datetime import date, datetime, timezone

import pytest
from marshmallow import missing

from animal_records.core.errors import PersistenceError
from animal_records.models.animal import Animal, AnimalSex, AnimalSpecies
from animal_records.models.audit_log import AuditAction, AuditEntityType, AuditLog, FieldChange
from animal_records.models.health_update import HealthUpdate, HealthUpdateType
from animal_records.models.media import HealthUpdateMedia, MediaCategory, MediaType
from animal_records.repositories import (
    AnimalMediaRepository,
    AnimalRepository,
    AuditLogRepository,
    HealthUpdateRepository,
)


def _buddy(**overrides):
    values = dict(
        id='', owner_id='owner-1', name='Buddy',
        species=AnimalSpecies.DOG, sex=AnimalSex.MALE, date_of_birth=date(2019, 4, 12),
    )
    values.update(overrides)
    return Animal(**values)


def _last_write(backend, op):
    return [w for w in backend.documents.writes if w[0] == op][-1]


def test_create_and_get_round_trip(backend):
    repo = AnimalRepository(backend)
    animal = _buddy()

    animal_id = repo.create(animal)
    loaded = repo.get(animal_id)

    assert animal.id == animal_id
    assert loaded.name == 'Buddy'
    assert loaded.species is AnimalSpecies.DOG
    assert loaded.breed is None
    assert loaded.date_of_birth == date(2019, 4, 12)
    # 생성 시각은 마이크로초까지 그대로 보존되어야 함
    assert loaded.created_at == animal.created_at
    assert loaded.updated_at == animal.updated_at


def test_document_stores_dates_as_utc_midnight_without_id(backend):
    repo = AnimalRepository(backend)
    repo.create(_buddy())

    _, _, _, data = _last_write(backend, 'add')
    assert 'id' not in data
    assert data['species'] == 'dog'
    assert data['date_of_birth'] == datetime(2019, 4, 12, tzinfo=timezone.utc)


def test_get_missing_document_returns_none(backend):
    assert AnimalRepository(backend).get('nope') is None


def test_list_for_owner_filters_by_owner(backend):
    repo = AnimalRepository(backend)
    repo.create(_buddy())
    repo.create(_buddy(name='Rex', owner_id='someone-else'))

    names = [a.name for a in repo.list_for_owner('owner-1')]
    assert names == ['Buddy']


def test_partial_update_only_sends_given_fields(backend):
    repo = AnimalRepository(backend)
    animal_id = repo.create(_buddy(breed='Beagle'))

    repo.update(animal_id, {'color': 'brown', 'breed': missing, 'notes': missing})

    _, _, doc_id, data = _last_write(backend, 'update')
    assert doc_id == animal_id
    assert set(data) == {'color', 'updated_at'}

    loaded = repo.get(animal_id)
    assert loaded.color == 'brown'
    assert loaded.breed == 'Beagle'
    assert loaded.date_of_birth == date(2019, 4, 12)


def test_update_parses_date_strings_and_drops_immutable_fields(backend):
    repo = AnimalRepository(backend)
    animal = _buddy()
    animal_id = repo.create(animal)

    cleaned = repo.update(animal_id, {
        'date_of_death': '2024-02-01',
        'id': 'other',
        'created_at': '2000-01-01T00:00:00Z',
    })

    assert cleaned['date_of_death'] == date(2024, 2, 1)
    assert 'id' not in cleaned
    assert 'created_at' not in cleaned
    loaded = repo.get(animal_id)
    assert loaded.date_of_death == date(2024, 2, 1)
    assert loaded.created_at == animal.created_at


def test_empty_update_still_stamps(backend):
    repo = AnimalRepository(backend)
    animal = _buddy()
    animal_id = repo.create(animal)

    cleaned = repo.update(animal_id, {})

    assert list(cleaned) == ['updated_at']
    assert repo.get(animal_id).updated_at >= animal.updated_at


def test_profile_picture_change_removes_previous_file(backend):
    old_url = backend.blobs.upload('animal-media/owner-1/a/old.jpg', io.BytesIO(b'old'), 3, 'image/jpeg')
    repo = AnimalRepository(backend)
    animal_id = repo.create(_buddy(profile_picture=old_url))

    repo.update(
        animal_id, {'profile_picture': 'https://example.com/new.jpg'},
        previous_profile_picture=old_url, owner_id='owner-1',
    )

    assert 'animal-media/owner-1/a/old.jpg' not in backend.blobs.blobs
    assert repo.get(animal_id).profile_picture == 'https://example.com/new.jpg'


def test_profile_picture_cleanup_failure_keeps_update(backend):
    repo = AnimalRepository(backend)
    animal_id = repo.create(_buddy(profile_picture='https://example.com/gone.jpg'))

    repo.update(
        animal_id, {'profile_picture': 'https://example.com/new.jpg'},
        previous_profile_picture='https://example.com/gone.jpg',
        owner_id='owner-1',
    )

    assert repo.get(animal_id).profile_picture == 'https://example.com/new.jpg'


def test_profile_picture_of_another_owner_is_never_deleted(backend):
    foreign_url = backend.blobs.upload('animal-media/owner-1/a/portrait.jpg', io.BytesIO(b'jpg'), 3, 'image/jpeg')
    repo = AnimalRepository(backend)
    animal_id = repo.create(_buddy(owner_id='stranger-1', profile_picture=foreign_url))

    repo.update(animal_id, {'profile_picture': None}, previous_profile_picture=foreign_url, owner_id='stranger-1')

    assert 'animal-media/owner-1/a/portrait.jpg' in backend.blobs.blobs
    assert repo.get(animal_id).profile_picture is None


def test_deleting_animal_leaves_health_updates(backend):
    animals = AnimalRepository(backend)
    health_updates = HealthUpdateRepository(backend)
    animal_id = animals.create(_buddy())
    update = HealthUpdate(
        id='', animal_id=animal_id, created_by='owner-1', title='Annual checkup',
        date=date(2024, 3, 1), type=HealthUpdateType.CHECKUP, weight=12.5,
    )
    health_updates.create(update)

    animals.delete(animal_id)

    assert animals.get(animal_id) is None
    remaining = health_updates.list_for_animal(animal_id)
    assert [u.title for u in remaining] == ['Annual checkup']


def test_health_update_keeps_owner_fields_on_update(backend):
    repo = HealthUpdateRepository(backend)
    update = HealthUpdate(id='', animal_id='a-1', created_by='owner-1', title='Shots', date=date(2024, 1, 2))
    update_id = repo.create(update)

    cleaned = repo.update(update_id, {'animal_id': 'a-2', 'created_by': 'x', 'title': 'Rabies shot'})

    assert set(cleaned) == {'title', 'updated_at'}
    loaded = repo.get(update_id)
    assert loaded.animal_id == 'a-1'
    assert loaded.title == 'Rabies shot'


def test_backend_failure_is_wrapped(backend, monkeypatch):
    def refuse(collection, data):
        raise RuntimeError('permission denied')

    monkeypatch.setattr(backend.documents, 'add', refuse)

    with pytest.raises(PersistenceError) as exc_info:
        AnimalRepository(backend).create(_buddy())

    assert exc_info.value.operation == 'create'
    assert 'permission denied' in str(exc_info.value)


def test_audit_log_repository_is_append_only(backend):
    repo = AuditLogRepository(backend)
    log = AuditLog(
        id='', animal_id='a-1', user_id='owner-1', action=AuditAction.UPDATED,
        entity_type=AuditEntityType.ANIMAL, entity_id='a-1', summary='Updated date_of_birth',
        changes=[FieldChange('date_of_birth', date(2019, 4, 12), date(2019, 5, 1))],
    )

    repo.create(log)

    assert not hasattr(repo, 'update')
    assert not hasattr(repo, 'delete')
    stored = repo.list_for_animal('a-1')
    assert stored[0].timestamp == log.timestamp
    assert stored[0].changes[0].field == 'date_of_birth'
    # 날짜 전용 필드는 datetime이 아닌 date로 읽혀야 함
    assert stored[0].changes[0].old_value == date(2019, 4, 12)
    assert stored[0].changes[0].new_value == date(2019, 5, 1)
    assert not isinstance(stored[0].changes[0].new_value, datetime)


def test_media_repository_rejects_embedded_media(backend):
    repo = AnimalMediaRepository(backend)
    embedded = HealthUpdateMedia(
        id='m-1', animal_id='a-1', type=MediaType.PHOTO, file_name='xray.png', original_name='xray.png',
        file_size=10, mime_type='image/png', url='https://example.com/xray.png',
        storage_path='health-update-media/owner-1/a-1/h-1/xray.png', category=MediaCategory.XRAY,
        uploaded_by='owner-1', uploaded_at=datetime(2024, 3, 1, tzinfo=timezone.utc), health_update_id='h-1',
    )
    backend.documents.add('animal_media', repo.to_document(embedded.to_dict()))

    with pytest.raises(ValueError):
        repo.list_for_animal('a-1')
