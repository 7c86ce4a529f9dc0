# scheduling/validation.py - Request payload validation
from collections import namedtuple

from .errors import ValidationError
from .instants import parse_instant
from .recurrence import RECURRENCE_KINDS, RECURRENCE_NONE

DEFAULT_COLOR = '#3b82f6'

SCOPE_SINGLE = 'single'
SCOPE_FOLLOWING = 'following'
SCOPE_ALL = 'all'
DELETE_SCOPES = (SCOPE_SINGLE, SCOPE_FOLLOWING, SCOPE_ALL)

# A validated create/update request; `until` is None iff recurrence is 'none'
AppointmentDefinition = namedtuple(
    'AppointmentDefinition',
    ['title', 'start', 'end', 'color', 'recurrence', 'until'],
)


def normalize_recurrence(value):
    if value is None or not str(value).strip():
        return RECURRENCE_NONE
    return str(value).strip().lower()


def normalize_scope(value):
    """Normalize a delete scope; missing means 'single'"""
    scope = SCOPE_SINGLE if value is None else str(value).strip().lower()
    if scope not in DELETE_SCOPES:
        raise ValidationError('Invalid scope. Use: single, following, all.')
    return scope


def _instant(data, key, required=True):
    raw = data.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise ValidationError(f"'{key}' is required.")
        return None
    try:
        return parse_instant(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be an ISO-8601 timestamp.")


def parse_definition(data):
    """Validate a raw appointment payload into an AppointmentDefinition.

    Checks run in a fixed order: title, start/end, recurrence kind, until
    bound. The first failure raises ValidationError.
    """
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')

    title = data.get('title')
    if not isinstance(title, str) or not title.strip():
        raise ValidationError('Title is required.')

    start = _instant(data, 'start')
    end = _instant(data, 'end')
    if end <= start:
        raise ValidationError('End must be after Start.')

    recurrence = normalize_recurrence(data.get('recurrence'))
    if recurrence not in RECURRENCE_KINDS:
        raise ValidationError('Invalid recurrence. Use: none, daily, weekly, monthly.')

    color = data.get('color')
    if not isinstance(color, str) or not color.strip():
        color = DEFAULT_COLOR

    until = None
    if recurrence != RECURRENCE_NONE:
        until = _instant(data, 'recurrenceUntil', required=False)
        if until is None:
            raise ValidationError('recurrenceUntil is required for recurring appointments.')
        if until < start:
            raise ValidationError('recurrenceUntil must be on or after Start.')

    return AppointmentDefinition(title.strip(), start, end, color, recurrence, until)


def parse_range(raw_from, raw_to):
    """Parse the bounds of a [from, to) query window"""
    window = {'from': raw_from, 'to': raw_to}
    return _instant(window, 'from'), _instant(window, 'to')
