# animal_records/audit/test_trail.py
from datetime import date

from animal_records.audit.trail import AuditTrail
from animal_records.models.animal import Animal, AnimalSex, AnimalSpecies
from animal_records.models.audit_log import AuditAction, AuditEntityType
from animal_records.repositories import AuditLogRepository

BUDDY = Animal(
    id='a-1', owner_id='owner-1', name='Buddy',
    species=AnimalSpecies.DOG, sex=AnimalSex.MALE, date_of_birth=date(2019, 4, 12),
)


def test_update_without_changes_writes_nothing(backend, owner):
    repo = AuditLogRepository(backend)
    trail = AuditTrail(repo)

    assert trail.record_update('a-1', owner, BUDDY, {'name': 'Buddy', 'breed': None}) is None
    assert repo.list_for_animal('a-1') == []


def test_update_with_changes_writes_one_log(backend, owner):
    repo = AuditLogRepository(backend)
    trail = AuditTrail(repo)

    log = trail.record_update('a-1', owner, BUDDY, {'color': 'brown'})

    stored = repo.list_for_animal('a-1')
    assert len(stored) == 1
    assert stored[0].id == log.id
    assert stored[0].action is AuditAction.UPDATED
    assert stored[0].entity_type is AuditEntityType.ANIMAL
    assert stored[0].entity_id == 'a-1'
    assert stored[0].summary == 'Updated color'
    assert stored[0].user_name == 'Jamie Rivera'
    assert stored[0].user_email == 'jamie@example.com'
    assert [c.field for c in stored[0].changes] == ['color']


def test_creation_and_deletion_summaries(backend, owner):
    trail = AuditTrail(AuditLogRepository(backend))

    created = trail.record_creation('a-1', owner, 'Buddy')
    deleted = trail.record_deletion('a-1', owner, 'Buddy')

    assert (created.action, created.summary) == (AuditAction.CREATED, 'Created Buddy')
    assert (deleted.action, deleted.summary) == (AuditAction.DELETED, 'Deleted Buddy')


def test_write_failure_is_logged_and_swallowed(backend, owner, monkeypatch, caplog):
    def refuse(collection, data):
        raise RuntimeError('quota exceeded')

    monkeypatch.setattr(backend.documents, 'add', refuse)
    trail = AuditTrail(AuditLogRepository(backend))

    assert trail.record_update('a-1', owner, BUDDY, {'color': 'brown'}) is None
    assert 'Failed to write audit log' in caplog.text
