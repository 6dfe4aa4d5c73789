# animal_records/audit/test_diff.py
"""
필드 단위 변경 비교 테스트

사용법: python -m pytest animal_records/audit/test_diff.py -v
"""

from datetime import date, datetime, timezone

from marshmallow import missing

from animal_records.audit.diff import compute_changes, summarize_changes, values_equal
from animal_records.models.animal import Animal, AnimalSex, AnimalSpecies, WeightUnit


def _buddy(**overrides):
    values = dict(
        id='a-1', owner_id='owner-1', name='Buddy',
        species=AnimalSpecies.DOG, sex=AnimalSex.MALE, date_of_birth=date(2019, 4, 12),
    )
    values.update(overrides)
    return Animal(**values)


def test_setting_a_color_records_one_change():
    changes = compute_changes(_buddy(), {'color': 'brown'})

    assert len(changes) == 1
    assert changes[0].field == 'color'
    assert changes[0].old_value is None
    assert changes[0].new_value == 'brown'
    assert summarize_changes(changes) == 'Updated color'


def test_same_input_gives_same_result():
    before = _buddy(breed='Beagle')
    patch = {'breed': 'Basset', 'notes': 'Loves walks'}

    first = compute_changes(before, patch)
    second = compute_changes(before, patch)

    assert [c.to_dict() for c in first] == [c.to_dict() for c in second]


def test_patch_equal_to_current_state_has_no_changes():
    before = _buddy(color='brown', weight=12.5)
    assert compute_changes(before, {'color': 'brown', 'weight': 12.5, 'name': 'Buddy'}) == []


def test_none_and_missing_are_equivalent():
    before = _buddy(breed=None)
    assert compute_changes(before, {'breed': None, 'markings': missing}) == []


def test_empty_string_is_a_value():
    changes = compute_changes(_buddy(notes=''), {'notes': None})
    assert [(c.field, c.old_value, c.new_value) for c in changes] == [('notes', '', None)]

    changes = compute_changes(_buddy(), {'color': ''})
    assert [(c.field, c.old_value, c.new_value) for c in changes] == [('color', None, '')]


def test_clearing_a_value_is_a_change():
    changes = compute_changes(_buddy(breed='Beagle'), {'breed': None})
    assert [(c.field, c.old_value, c.new_value) for c in changes] == [('breed', 'Beagle', None)]


def test_date_strings_compare_by_day():
    before = _buddy()
    assert compute_changes(before, {'date_of_birth': '2019-04-12'}) == []

    changes = compute_changes(before, {'date_of_birth': '2019-05-01'})
    assert changes[0].old_value == date(2019, 4, 12)
    assert changes[0].new_value == date(2019, 5, 1)


def test_enum_and_string_values_compare_equal():
    before = _buddy(weight_unit=WeightUnit.KG)
    assert compute_changes(before, {'weight_unit': 'kg', 'species': 'dog'}) == []

    changes = compute_changes(before, {'weight_unit': 'lbs'})
    assert (changes[0].old_value, changes[0].new_value) == ('kg', 'lbs')


def test_bookkeeping_fields_are_ignored():
    before = _buddy(created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    patch = {'id': 'other', 'updated_at': datetime(2024, 6, 1, tzinfo=timezone.utc), 'created_at': None}
    assert compute_changes(before, patch) == []


def test_change_order_follows_patch():
    changes = compute_changes(_buddy(), {'notes': 'x', 'color': 'brown', 'breed': 'Beagle'})
    assert [c.field for c in changes] == ['notes', 'color', 'breed']
    assert summarize_changes(changes) == 'Updated notes, color, breed'


def test_dict_before_with_explicit_date_fields():
    before = {'date': datetime(2024, 3, 1, tzinfo=timezone.utc), 'title': 'Checkup'}
    assert compute_changes(before, {'date': '2024-03-01'}, date_fields=['date']) == []


def test_values_equal_rules():
    assert not values_equal(None, '')
    assert values_equal('', '')
    assert values_equal(missing, None)
    assert not values_equal(None, 0)
    assert values_equal(date(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc), is_date=True)
    assert values_equal(['a', 'b'], ['a', 'b'])
    assert not values_equal(['a', 'b'], ['b', 'a'])


def test_summary_of_no_changes_is_empty():
    assert summarize_changes([]) == ''
