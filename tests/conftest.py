"""Shared fixtures: stores, a Flask test client and small datetime helpers."""

from datetime import datetime, timezone

import pytest

from app import create_app
from scheduling.store import AppointmentStore
from scheduling.validation import AppointmentDefinition


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def weekly_definition(title='Standup', color='#3b82f6'):
    """Weekly 09:00-10:00 from 2026-01-05 through 2026-01-26 (four occurrences)"""
    return AppointmentDefinition(
        title, utc(2026, 1, 5, 9), utc(2026, 1, 5, 10), color, 'weekly', utc(2026, 1, 26, 9),
    )


@pytest.fixture
def store():
    return AppointmentStore()


@pytest.fixture
def file_store(tmp_path):
    return AppointmentStore(str(tmp_path / 'data' / 'appointments.json'))


@pytest.fixture
def app(store):
    return create_app(store=store, config={'TESTING': True, 'CALENDAR_LOG_LEVEL': 'WARNING'})


@pytest.fixture
def client(app):
    return app.test_client()
