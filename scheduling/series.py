# scheduling/series.py - Appointment series engine
"""
Create, edit, delete and list materialized appointment occurrences.

Every operation takes the store as its first argument and keeps no state of
its own. Editing an occurrence "splits" its series: the edited record and
everything after it is rewritten, everything before it is left alone, even
when that leaves older members with stale title/color/until values.

A split is two separate store calls (delete the future siblings, then insert
the regenerated tail). A reader running between the two can observe a gap,
and concurrent edits of one series can interleave; callers that need a
consistent view must serialize edits per series themselves.
"""
import logging
import uuid

from .errors import NotFound, ValidationError
from .instants import format_instant
from .recurrence import (
    RECURRENCE_NONE, build_occurrence, generate_future_occurrences, generate_occurrences,
)
from .validation import SCOPE_ALL, SCOPE_SINGLE, normalize_scope

logger = logging.getLogger(__name__)


def new_series_id():
    return uuid.uuid4().hex


def _standalone(definition):
    return build_occurrence(
        definition.title, definition.color, definition.start, definition.end,
        RECURRENCE_NONE, None, None,
    )


def get_appointment(store, appointment_id):
    occurrence = store.get(appointment_id)
    if occurrence is None:
        raise NotFound(f"Appointment {appointment_id} not found.")
    return occurrence


def list_appointments(store, range_from, range_to):
    """Occurrences overlapping the half-open window [range_from, range_to)"""
    if range_to <= range_from:
        raise ValidationError("Invalid query: 'to' must be after 'from'.")
    return store.find_range(range_from, range_to)


def create_appointment(store, definition):
    """Persist a new appointment and return the list of created occurrences.

    A non-recurring definition yields exactly one record. A recurring one is
    expanded under a fresh series id; an expansion with no occurrences is
    rejected and nothing is written.
    """
    if definition.recurrence == RECURRENCE_NONE:
        created = store.insert_one(_standalone(definition))
        logger.info("Created appointment %s", created['id'])
        return [created]

    series_id = new_series_id()
    occurrences = generate_occurrences(
        definition.title, definition.color, definition.start, definition.end,
        definition.recurrence, definition.until, series_id,
    )
    if not occurrences:
        raise ValidationError('No occurrences generated.')

    created = store.insert_many(occurrences)
    logger.info(
        "Created %s series %s with %d occurrences",
        definition.recurrence, series_id, len(created),
    )
    return created


def update_appointment(store, appointment_id, definition):
    """Apply an edit to one occurrence and every later member of its series.

    Editing to 'none' only rewrites the target record; its former siblings
    stay as they are. Editing to a recurring kind rewrites the target in
    place, drops every other member of the (possibly new) series starting at
    or after the new start, and regenerates the tail one period later.
    """
    existing = get_appointment(store, appointment_id)

    if definition.recurrence == RECURRENCE_NONE:
        updated = _standalone(definition)
        if not store.replace(appointment_id, updated):
            raise NotFound(f"Appointment {appointment_id} not found.")
        logger.info("Detached appointment %s from series %s", appointment_id, existing.get('seriesId'))
        return dict(updated, id=appointment_id)

    series_id = existing.get('seriesId') or new_series_id()
    updated = build_occurrence(
        definition.title, definition.color, definition.start, definition.end,
        definition.recurrence, definition.until, series_id,
    )
    # Built before any write so a generation failure leaves the series intact
    future = generate_future_occurrences(
        definition.title, definition.color, definition.start, definition.end,
        definition.recurrence, definition.until, series_id,
    )

    if not store.replace(appointment_id, updated):
        raise NotFound(f"Appointment {appointment_id} not found.")

    removed = store.delete_series_from_except(series_id, definition.start, appointment_id)
    store.insert_many(future)

    logger.info(
        "Split series %s at %s: removed %d, regenerated %d",
        series_id, format_instant(definition.start), removed, len(future),
    )
    return dict(updated, id=appointment_id)


def effective_scope(occurrence, scope):
    """A standalone occurrence is only ever deleted on its own"""
    if occurrence.get('recurrence', RECURRENCE_NONE) == RECURRENCE_NONE or not occurrence.get('seriesId'):
        return SCOPE_SINGLE
    return scope


def deletion_bounds(occurrence, scope):
    """The (series_id, from_start) filter a scoped delete applies.

    (None, None) means the occurrence alone; a None from_start means the
    whole series.
    """
    scope = effective_scope(occurrence, scope)
    if scope == SCOPE_SINGLE:
        return None, None
    if scope == SCOPE_ALL:
        return occurrence['seriesId'], None
    return occurrence['seriesId'], occurrence['start']


def resolve_deletion(store, occurrence, scope):
    """Ids of the occurrences a delete with `scope` would remove, without removing them"""
    series_id, from_start = deletion_bounds(occurrence, normalize_scope(scope))
    if series_id is None:
        return {occurrence['id']}
    return {member['id'] for member in store.find_series(series_id, from_start)}


def delete_appointment(store, appointment_id, scope=SCOPE_SINGLE):
    """Delete an occurrence (and, by scope, its series siblings); returns the count"""
    scope = normalize_scope(scope)
    existing = get_appointment(store, appointment_id)
    series_id, from_start = deletion_bounds(existing, scope)

    if series_id is None:
        deleted = 1 if store.delete(appointment_id) else 0
    elif from_start is None:
        deleted = store.delete_series(series_id)
    else:
        deleted = store.delete_series_from(series_id, from_start)

    if not deleted:
        raise NotFound(f"Appointment {appointment_id} not found.")

    logger.info(
        "Deleted %d occurrence(s) from %s with scope '%s'",
        deleted, appointment_id, effective_scope(existing, scope),
    )
    return deleted
