# animal_records/search/test_engine.py
"""
통합 검색 테스트

사용법: python -m pytest animal_records/search/test_engine.py -v
"""

from datetime import date, datetime, timezone

from animal_records.models.animal import Animal, AnimalSex, AnimalSpecies, WeightUnit
from animal_records.models.audit_log import AuditAction, AuditEntityType, AuditLog
from animal_records.models.health_update import HealthUpdate, HealthUpdateType
from animal_records.models.media import AnimalMedia, MediaCategory, MediaType
from animal_records.search.engine import RecordSet, search_records


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _records():
    buddy = Animal(
        id='a1', owner_id='owner-1', name='Buddy', species=AnimalSpecies.DOG, sex=AnimalSex.MALE,
        date_of_birth=date(2019, 4, 12), color='brown', created_at=_utc(2024, 1, 5, 9, 0),
    )
    misty = Animal(
        id='a2', owner_id='owner-1', name='Misty', species=AnimalSpecies.CAT, sex=AnimalSex.FEMALE,
        date_of_birth=date(2020, 2, 1), breed='Siamese', notes='Shy around Buddy', created_at=_utc(2024, 1, 6),
    )
    checkup = HealthUpdate(
        id='h1', animal_id='a1', created_by='owner-1', title='Annual checkup', date=date(2024, 3, 1),
        type=HealthUpdateType.CHECKUP, weight=12.5, weight_unit=WeightUnit.KG, veterinarian='Dr. Brown',
    )
    shots = HealthUpdate(
        id='h2', animal_id='a2', created_by='owner-1', title='Rabies shot', date=date(2024, 3, 15),
        type=HealthUpdateType.VACCINATION, tags=['rabies', 'yearly'],
    )
    photo = AnimalMedia(
        id='m1', animal_id='a1', type=MediaType.PHOTO, file_name='abc.jpg', original_name='beach.jpg',
        file_size=100, mime_type='image/jpeg', url='https://example.com/abc.jpg',
        storage_path='animal-media/owner-1/a1/abc.jpg', category=MediaCategory.GALLERY,
        uploaded_by='owner-1', uploaded_at=_utc(2024, 2, 10, 15, 30), caption='Buddy at the beach',
    )
    log = AuditLog(
        id='l1', animal_id='a1', user_id='owner-1', action=AuditAction.UPDATED,
        entity_type=AuditEntityType.ANIMAL, entity_id='a1', summary='Updated color',
        user_name='Jamie Rivera', user_email='jamie@example.com', timestamp=_utc(2024, 3, 20, 8, 0),
    )
    return RecordSet(animals=[buddy, misty], health_updates=[checkup, shots], media=[photo], audit_logs=[log])


def test_color_search_finds_animal():
    results = search_records('brown', RecordSet(animals=_records().animals))

    assert [r.id for r in results] == ['animal_a1']
    assert 'color' in results[0].matched_fields
    assert results[0].relevance == 5
    assert results[0].title == 'Buddy'
    assert results[0].description == 'dog'
    assert results[0].animal_name == 'Buddy'


def test_query_is_case_insensitive_and_trimmed():
    assert [r.id for r in search_records('  BROWN ', _records(), types=['animal'])] == ['animal_a1']


def test_blank_query_returns_nothing():
    assert search_records('', _records()) == []
    assert search_records('   ', _records()) == []


def test_relevance_weights_by_type():
    results = {r.id: r for r in search_records('buddy', _records())}

    assert results['animal_a1'].relevance == 10
    assert results['animal_a2'].relevance == 5
    assert results['media_m1'].relevance == 7
    assert results['media_m1'].matched_fields == ['caption']

    health = {r.id: r for r in search_records('rabies', _records())}
    assert health['health_h2'].relevance == 8
    assert health['health_h2'].matched_fields == ['title', 'tags']
    assert search_records('yearly', _records())[0].relevance == 6


def test_results_are_ordered_deterministically():
    records = _records()
    first = [r.id for r in search_records('b', records)]
    second = [r.id for r in search_records('b', records)]

    assert first == second
    results = search_records('buddy', records)
    assert [r.id for r in results] == ['animal_a1', 'media_m1', 'animal_a2']


def test_health_update_fields_and_descriptions():
    results = search_records('12.5', _records())

    assert [r.id for r in results] == ['health_h1']
    assert results[0].matched_fields == ['weight']
    assert results[0].description == 'checkup update'
    assert results[0].animal_name == 'Buddy'


def test_audit_log_result():
    results = search_records('jamie', _records(), types=['audit_log'])

    assert [r.id for r in results] == ['audit_l1']
    assert results[0].title == 'Updated color'
    assert results[0].description == 'updated by Jamie Rivera'
    assert results[0].relevance == 4


def test_type_filter():
    results = search_records('b', _records(), types=['media'])
    assert {r.type for r in results} == {'media'}


def test_date_range_is_inclusive():
    records = _records()

    on_day = search_records('rabies', records, date_from=date(2024, 3, 15), date_to=date(2024, 3, 15))
    assert [r.id for r in on_day] == ['health_h2']

    # 날짜만 준 종료일은 그날 전체를 포함
    same_day_audit = search_records('color', records, types=['audit_log'], date_to=date(2024, 3, 20))
    assert [r.id for r in same_day_audit] == ['audit_l1']

    before = search_records('color', records, types=['audit_log'], date_to=date(2024, 3, 19))
    assert before == []
