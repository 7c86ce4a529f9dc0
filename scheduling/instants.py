# scheduling/instants.py - UTC instant parsing and formatting
from datetime import datetime, timezone

INSTANT_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
INSTANT_FORMAT_PRECISE = '%Y-%m-%dT%H:%M:%S.%fZ'
INSTANT_FIELDS = ('start', 'end', 'recurrenceUntil')


def parse_instant(value):
    """Parse an ISO-8601 string into an aware UTC datetime.

    A trailing 'Z' is accepted and naive values are taken as UTC.
    Raises ValueError on anything that is not an ISO timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_instant(value):
    if value is None:
        return None
    value = value.astimezone(timezone.utc)
    if value.microsecond:
        return value.strftime(INSTANT_FORMAT_PRECISE)
    return value.strftime(INSTANT_FORMAT)


def serialize_occurrence(occurrence):
    """Copy of an occurrence with its instants rendered as ISO strings"""
    out = dict(occurrence)
    for key in INSTANT_FIELDS:
        if isinstance(out.get(key), datetime):
            out[key] = format_instant(out[key])
    return out


def deserialize_occurrence(raw):
    out = dict(raw)
    for key in INSTANT_FIELDS:
        if out.get(key):
            out[key] = parse_instant(out[key])
        else:
            out[key] = None
    return out
