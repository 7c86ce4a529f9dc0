# scheduling/recurrence.py - Recurring Occurrence Generation
import calendar
import logging
from datetime import MAXYEAR, timedelta

from .instants import format_instant

logger = logging.getLogger(__name__)

RECURRENCE_NONE = 'none'
RECURRENCE_DAILY = 'daily'
RECURRENCE_WEEKLY = 'weekly'
RECURRENCE_MONTHLY = 'monthly'
RECURRENCE_KINDS = (RECURRENCE_NONE, RECURRENCE_DAILY, RECURRENCE_WEEKLY, RECURRENCE_MONTHLY)

# Hard ceiling on one generation batch, whatever the until bound says
MAX_OCCURRENCES = 1500


def add_months(value, months=1):
    """Shift a datetime by calendar months, clamping the day to the target month's length"""
    new_month = value.month + months
    new_year = value.year + (new_month - 1) // 12
    new_month = ((new_month - 1) % 12) + 1
    if new_year > MAXYEAR:
        raise OverflowError("date value out of range")
    try:
        return value.replace(year=new_year, month=new_month)
    except ValueError:
        # Handle day overflow (e.g., Jan 31 -> Feb 28)
        max_day = calendar.monthrange(new_year, new_month)[1]
        return value.replace(year=new_year, month=new_month, day=min(value.day, max_day))


def next_occurrence_start(current, recurrence):
    """Advance an occurrence start by exactly one period of the rule"""
    if recurrence == RECURRENCE_DAILY:
        return current + timedelta(days=1)
    if recurrence == RECURRENCE_WEEKLY:
        return current + timedelta(weeks=1)
    if recurrence == RECURRENCE_MONTHLY:
        return add_months(current, 1)
    raise ValueError(f"Recurrence '{recurrence}' has no period")


def build_occurrence(title, color, start, end, recurrence, until, series_id):
    """Create a single occurrence record; the store assigns its id on insert"""
    return {
        'title': title,
        'start': start,
        'end': end,
        'color': color,
        'recurrence': recurrence,
        'recurrenceUntil': until,
        'seriesId': series_id,
    }


def _advance(cursor, recurrence):
    """Next period start, or None once the calendar runs out (year 9999)"""
    try:
        return next_occurrence_start(cursor, recurrence)
    except OverflowError:
        return None


def _materialize(title, color, cursor, duration, recurrence, until, series_id, max_occurrences):
    occurrences = []
    while cursor is not None and len(occurrences) < max_occurrences and cursor <= until:
        try:
            end = cursor + duration
        except OverflowError:
            break
        occurrences.append(build_occurrence(title, color, cursor, end, recurrence, until, series_id))
        cursor = _advance(cursor, recurrence)

    if cursor is not None and len(occurrences) == max_occurrences and cursor <= until:
        logger.warning(
            "Series %s hit the %d occurrence cap before %s",
            series_id, max_occurrences, format_instant(until),
        )
    return occurrences


def generate_occurrences(title, color, start, end, recurrence, until, series_id,
                         max_occurrences=MAX_OCCURRENCES):
    """Expand a recurrence rule into its ordered, bounded list of occurrences.

    The first occurrence sits at (start, end); each following one is one
    period after the previous start and keeps the same duration. Generation
    stops once a start would pass `until` or `max_occurrences` is reached.
    Callers validate end > start, until >= start and a periodic recurrence.
    """
    return _materialize(title, color, start, end - start, recurrence, until, series_id, max_occurrences)


def generate_future_occurrences(title, color, start, end, recurrence, until, series_id,
                                max_occurrences=MAX_OCCURRENCES):
    """Same as generate_occurrences, but starting one period after `start`"""
    cursor = _advance(start, recurrence)
    return _materialize(title, color, cursor, end - start, recurrence, until, series_id, max_occurrences)


def recurrence_text(occurrence):
    """Generate human-readable recurrence description"""
    recurrence = occurrence.get('recurrence', RECURRENCE_NONE)
    if recurrence == RECURRENCE_NONE:
        return 'Does not repeat'

    head = recurrence.capitalize()
    until = occurrence.get('recurrenceUntil')
    if until is not None:
        head += f", until {until.date().isoformat()}"
    return head
