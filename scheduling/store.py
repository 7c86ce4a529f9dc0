# scheduling/store.py - Appointment Storage Management
import json
import logging
import os
import threading
import uuid

from .errors import StoreError
from .instants import deserialize_occurrence, serialize_occurrence

logger = logging.getLogger(__name__)

# File paths
DATA_DIR = 'data'
APPOINTMENTS_FILE = os.path.join(DATA_DIR, 'appointments.json')


def _by_start(records):
    return sorted(records, key=lambda record: record['start'])


class AppointmentStore:
    """Document collection of occurrence records keyed by id.

    With a `path` the collection lives in a JSON file that is re-read on
    every call; without one it is held in memory. Each call runs under the
    store's lock, but separate calls are not atomic with each other.
    """

    def __init__(self, path=None):
        self.path = path
        self._memory = {}
        self._lock = threading.Lock()

    # ------------------------------
    # Raw load / save
    # ------------------------------

    def _load(self):
        if self.path is None:
            return {record_id: dict(record) for record_id, record in self._memory.items()}
        try:
            if not os.path.exists(self.path):
                return {}
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f) or {}
            return {record_id: deserialize_occurrence(record) for record_id, record in raw.items()}
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", self.path, e)
            raise StoreError(f"Failed to load appointments: {e}")

    def _save(self, records):
        if self.path is None:
            self._memory = records
            return
        try:
            os.makedirs(os.path.dirname(self.path) or '.', exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(
                    {record_id: serialize_occurrence(record) for record_id, record in records.items()},
                    f, ensure_ascii=False, indent=2,
                )
        except (OSError, TypeError) as e:
            logger.error("Error saving %s: %s", self.path, e)
            raise StoreError(f"Failed to save appointments: {e}")

    # ------------------------------
    # Reads
    # ------------------------------

    def find_range(self, range_from, range_to):
        """Occurrences overlapping [range_from, range_to), ordered by start"""
        with self._lock:
            records = self._load()
        return _by_start(
            record for record in records.values()
            if record['start'] < range_to and record['end'] > range_from
        )

    def get(self, record_id):
        with self._lock:
            return self._load().get(record_id)

    def find_series(self, series_id, from_start=None):
        """Members of a series, optionally only those starting at or after from_start"""
        with self._lock:
            records = self._load()
        return _by_start(
            record for record in records.values()
            if record.get('seriesId') == series_id
            and (from_start is None or record['start'] >= from_start)
        )

    # ------------------------------
    # Writes
    # ------------------------------

    def insert_one(self, record):
        return self.insert_many([record])[0]

    def insert_many(self, records):
        """Assign ids and store the records; an empty batch is a no-op"""
        if not records:
            return []
        stored = [dict(record, id=str(uuid.uuid4())) for record in records]
        with self._lock:
            existing = self._load()
            for record in stored:
                existing[record['id']] = record
            self._save(existing)
        return [dict(record) for record in stored]

    def replace(self, record_id, record):
        """Replace a record in place, keeping its id; False when no match"""
        with self._lock:
            existing = self._load()
            if record_id not in existing:
                return False
            existing[record_id] = dict(record, id=record_id)
            self._save(existing)
        return True

    def delete(self, record_id):
        with self._lock:
            existing = self._load()
            if record_id not in existing:
                return False
            del existing[record_id]
            self._save(existing)
        return True

    def _delete_matching(self, predicate):
        with self._lock:
            existing = self._load()
            doomed = [record_id for record_id, record in existing.items() if predicate(record)]
            if doomed:
                for record_id in doomed:
                    del existing[record_id]
                self._save(existing)
        return len(doomed)

    def delete_series(self, series_id):
        return self._delete_matching(lambda record: record.get('seriesId') == series_id)

    def delete_series_from(self, series_id, from_start):
        return self._delete_matching(
            lambda record: record.get('seriesId') == series_id and record['start'] >= from_start
        )

    def delete_series_from_except(self, series_id, from_start, except_id):
        return self._delete_matching(
            lambda record: record.get('seriesId') == series_id
            and record['start'] >= from_start
            and record['id'] != except_id
        )
