"""Tests for the JSON-backed appointment store."""

import json
import os

import pytest

from conftest import utc
from scheduling.errors import StoreError
from scheduling.recurrence import build_occurrence, generate_occurrences
from scheduling.store import AppointmentStore


def occurrence(day, hour=9, series_id=None):
    recurrence = 'weekly' if series_id else 'none'
    until = utc(2026, 12, 31) if series_id else None
    return build_occurrence(
        f'Jan {day}', '#fff', utc(2026, 1, day, hour), utc(2026, 1, day, hour + 1), recurrence, until, series_id,
    )


def test_insert_assigns_unique_ids(file_store):
    stored = file_store.insert_many([occurrence(5), occurrence(6)])

    assert len({record['id'] for record in stored}) == 2
    assert file_store.get(stored[0]['id'])['title'] == 'Jan 5'


def test_insert_many_empty_is_noop(file_store):
    assert file_store.insert_many([]) == []
    assert not os.path.exists(file_store.path)


def test_records_survive_a_new_store_instance(file_store):
    created = file_store.insert_one(occurrence(5, series_id='s1'))

    reopened = AppointmentStore(file_store.path)
    loaded = reopened.get(created['id'])

    assert loaded == created
    assert loaded['start'] == utc(2026, 1, 5, 9)
    assert loaded['recurrenceUntil'] == utc(2026, 12, 31)


def test_file_holds_iso_instants(file_store):
    created = file_store.insert_one(occurrence(5))

    with open(file_store.path, encoding='utf-8') as f:
        raw = json.load(f)

    assert raw[created['id']]['start'] == '2026-01-05T09:00:00Z'
    assert raw[created['id']]['recurrenceUntil'] is None


def test_replace_keeps_id_and_reports_misses(file_store):
    created = file_store.insert_one(occurrence(5))

    assert file_store.replace(created['id'], occurrence(7)) is True
    assert file_store.get(created['id'])['start'] == utc(2026, 1, 7, 9)
    assert file_store.get(created['id'])['id'] == created['id']
    assert file_store.replace('missing', occurrence(7)) is False


def test_delete_reports_misses(file_store):
    created = file_store.insert_one(occurrence(5))

    assert file_store.delete(created['id']) is True
    assert file_store.delete(created['id']) is False
    assert file_store.get(created['id']) is None


def test_series_deletes(store):
    series = store.insert_many(generate_occurrences(
        'Weekly', '#fff', utc(2026, 1, 5, 9), utc(2026, 1, 5, 10), 'weekly', utc(2026, 1, 26, 9), 's1',
    ))
    store.insert_one(occurrence(12, series_id='s2'))

    assert store.delete_series_from_except('s1', utc(2026, 1, 12, 9), series[1]['id']) == 2
    assert [r['id'] for r in store.find_series('s1')] == [series[0]['id'], series[1]['id']]
    assert store.delete_series_from('s1', utc(2026, 1, 12, 9)) == 1
    assert store.delete_series('s1') == 1
    assert store.delete_series('s1') == 0
    assert len(store.find_series('s2')) == 1


def test_find_series_from_start(store):
    store.insert_many([occurrence(d, series_id='s') for d in (19, 5, 12)])

    assert [r['start'].day for r in store.find_series('s')] == [5, 12, 19]
    assert [r['start'].day for r in store.find_series('s', utc(2026, 1, 12, 9))] == [12, 19]


def test_find_range_orders_by_start(store):
    store.insert_many([occurrence(d) for d in (20, 3, 11)])

    found = store.find_range(utc(2026, 1, 1), utc(2026, 2, 1))
    assert [r['start'].day for r in found] == [3, 11, 20]


def test_returned_records_are_copies(store):
    created = store.insert_one(occurrence(5))
    created['title'] = 'mutated'

    assert store.get(created['id'])['title'] == 'Jan 5'


def test_corrupt_file_raises_store_error(tmp_path):
    path = tmp_path / 'appointments.json'
    path.write_text('{not json', encoding='utf-8')

    with pytest.raises(StoreError):
        AppointmentStore(str(path)).get('anything')
