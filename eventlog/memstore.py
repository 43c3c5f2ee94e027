"""
-----------------
eventlog.memstore
-----------------

In-memory implementation of the :class:`eventlog.storeapi.RecordRepository`.

The events are kept in a ``dict`` keyed by the sortable form of the event id. Nothing
is persisted, so this repository is useful for tests and for short-lived processes.
"""
from copy import deepcopy
from logging import getLogger
from threading import RLock

from eventlog.criteria import Sort
from eventlog.ids import to_sortable
from eventlog.storeapi import RecordRepository


log = getLogger(__name__)


def _comparable(field, value):
    if field == 'id' and value is not None:
        return to_sortable(value)
    return value


class InMemoryRecordRepository(RecordRepository):
    """Keeps the events in memory.

    The repository stores copies of the events, and returns copies, so the callers
    cannot change the stored state by changing the event objects.

    Unlike the default, :meth:`insert_if_absent` is atomic here: the check and the
    insert happen while holding the write lock.

    The instances of this class are thread-safe and can be shared between threads.
    """
    def __init__(self):
        self.events = {}
        self.lock = RLock()

    def upsert(self, event):
        with self.lock:
            self.events[to_sortable(event.id)] = deepcopy(event)
        log.debug('Stored event %s', event.id)
        return event

    def find_one(self, key):
        with self.lock:
            for event in self.events.values():
                if self._exact(event, key):
                    return deepcopy(event)
        log.debug('No event matching %s', key)
        return None

    def _exact(self, event, key):
        return (event.tenant_id == key.tenant_id and
                event.entity_type == key.entity_type and
                event.entity_id == key.entity_id and
                event.event_type == key.event_type and
                event.uid == key.event_uid)

    def exists_by_tenant_entity(self, tenant_id, entity_type, entity_id):
        with self.lock:
            return self._exists(tenant_id, entity_type, entity_id)

    def _exists(self, tenant_id, entity_type, entity_id):
        for event in self.events.values():
            if (event.tenant_id == tenant_id and
                    event.entity_type == entity_type and
                    event.entity_id == entity_id):
                return True
        return False

    def insert_if_absent(self, event):
        with self.lock:
            if self._exists(event.tenant_id, event.entity_type, event.entity_id):
                return None
            return self.upsert(event)

    def scan(self, criteria, order_by, limit, offset=0):
        with self.lock:
            matched = [event for event in self.events.values()
                       if criteria.matches(event, key=_comparable)]
        matched = self._sorted(matched, order_by)
        return [deepcopy(event) for event in matched[offset:offset + limit]]

    def top_n(self, match, limit, order_by=Sort('id', False)):
        with self.lock:
            matched = [event for event in self.events.values()
                       if all(getattr(event, field) == value for field, value in match.items())]
        matched = self._sorted(matched, order_by)
        return [deepcopy(event) for event in matched[:limit]]

    def _sorted(self, events, order_by):
        return sorted(events,
                      key=lambda event: _comparable(order_by.field, getattr(event, order_by.field)),
                      reverse=not order_by.ascending)

    def close(self):
        with self.lock:
            self.events.clear()
