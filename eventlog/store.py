"""
--------------
eventlog.store
--------------

The event store.

:class:`EventStore` completes the events (identifier, de-duplication key, tenant),
enforces the insert-if-not-exists policy and composes the query filters. The physical
storage is delegated to a :class:`eventlog.storeapi.RecordRepository`.

.. code-block:: python

    from eventlog.memstore import InMemoryRecordRepository
    from eventlog.model import Event, EntityId, TimePageLink
    from eventlog.store import EventStore

    store = EventStore(InMemoryRecordRepository())

    store.save(Event(tenant_id='t1', entity_type='DEVICE', entity_id='d1',
                     event_type='LIFECYCLE', body={'state': 'started'}))

    for event in store.find_events('t1', EntityId('DEVICE', 'd1'), TimePageLink(limit=10)):
        print(event.created_time, event.body)

"""
from concurrent.futures import ThreadPoolExecutor
from logging import getLogger
from threading import Lock

from eventlog import ids
from eventlog.criteria import Criteria, Sort
from eventlog.model import EventKey


log = getLogger(__name__)


SYSTEM_TENANT_ID = '13814000-1dd2-11b2-8080-808080808080'
"""Tenant of the system-level events. This is the time-based UUID of the Unix epoch."""

DEFAULT_ASYNC_WORKERS = 4

_executor = None
_executor_lock = Lock()


def shared_executor(max_workers=None):
    """Returns the process-wide worker pool used for asynchronous saves.

    The pool is created on first use. ``max_workers`` is only taken into account when
    the pool is created.

    :param max_workers: ``int``, number of worker threads. Defaults to ``4``.
    """
    global _executor
    with _executor_lock:
        if _executor is None:
            workers = max_workers or DEFAULT_ASYNC_WORKERS
            _executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='eventlog-save')
            log.info('Started shared save executor with %d workers', workers)
        return _executor


def shutdown_shared_executor(wait=True):
    """Shuts down the process-wide worker pool, if started.

    A later call to :func:`shared_executor` starts a new pool.
    """
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None
            log.info('Shared save executor stopped')


class EventStore:
    """Stores and queries events.

    The store itself keeps no state besides its collaborators; all state lives in the
    repository. An instance of this class is thread-safe if the repository is.

    :param repository: :class:`eventlog.storeapi.RecordRepository`, the physical storage.
    :param executor: :class:`concurrent.futures.Executor`, runs the asynchronous saves.
        Defaults to the process-wide :func:`shared_executor`.
    :param id_generator: ``function``, returns new time-based :class:`uuid.UUID`.
        Defaults to :func:`eventlog.ids.time_based`.
    """
    def __init__(self, repository, executor=None, id_generator=None):
        self.repository = repository
        self._executor = executor
        self.id_generator = id_generator or ids.time_based

    @property
    def executor(self):
        if self._executor is None:
            self._executor = shared_executor()
        return self._executor

    def _complete(self, event):
        if event.id is None:
            event.id = self.id_generator()
        if not event.uid:
            event.uid = str(event.id)
        if event.tenant_id is None:
            log.debug('Save system event with predefined tenant %s', SYSTEM_TENANT_ID)
            event.tenant_id = SYSTEM_TENANT_ID
        return event

    def save(self, event):
        """Saves an event.

        Missing fields are filled in before saving (the given event object is updated):

        * ``id`` - a new time-based UUID,
        * ``uid`` - the string form of ``id``,
        * ``tenant_id`` - :data:`SYSTEM_TENANT_ID`.

        There is no check for existing events; an event with the same ``id`` is
        replaced, and events with the same natural key may pile up.

        :param event: :class:`eventlog.model.Event`, the event to save.

        Returns the saved :class:`eventlog.model.Event`.
        """
        log.debug('Save event [%s]', event)
        return self.repository.upsert(self._complete(event))

    def save_async(self, event):
        """Saves an event on a worker thread.

        The fields are completed right away (as in :meth:`save`), so the ``id`` of the
        event is known when this method returns. The write itself runs on the executor.
        There is no ordering between concurrent saves.

        Returns :class:`concurrent.futures.Future` that resolves to the saved event, or
        raises the storage error.
        """
        log.debug('Save event async [%s]', event)
        return self.executor.submit(self.repository.upsert, self._complete(event))

    def save_if_not_exists(self, event):
        """Saves an event only if there is no event yet for its tenant and owning entity.

        Only ``(tenant_id, entity_type, entity_id)`` is checked; ``event_type`` and ``uid``
        are ignored, so there is at most one event per entity saved through this method.

        Whether the check and the insert are atomic depends on the repository, see
        :meth:`eventlog.storeapi.RecordRepository.insert_if_absent`.

        Returns the saved :class:`eventlog.model.Event`, or ``None`` if an event already
        existed (nothing is written).
        """
        self._complete(event)
        saved = self.repository.insert_if_absent(event)
        if saved is None:
            log.debug('Event for %s/%s of tenant %s already exists, skipping %s',
                      event.entity_type, event.entity_id, event.tenant_id, event.id)
        return saved

    def find_event(self, tenant_id, entity_id, event_type, event_uid):
        """Looks up an event by its natural key.

        :param tenant_id: ``str``, the tenant. ``None`` stands for the system tenant.
        :param entity_id: :class:`eventlog.model.EntityId`, the owning entity.
        :param event_type: ``str``, the event type.
        :param event_uid: ``str``, the event de-duplication key.

        Returns the :class:`eventlog.model.Event`, or ``None`` if not found.
        """
        key = EventKey(tenant_id=tenant_id if tenant_id is not None else SYSTEM_TENANT_ID,
                       entity_type=entity_id.entity_type,
                       entity_id=entity_id.id,
                       event_type=event_type,
                       event_uid=event_uid)
        return self.repository.find_one(key)

    def find_events(self, tenant_id, entity_id, page_link, event_type=None):
        """Finds the events within a time range.

        All filters are optional and combined with AND:

        * ``tenant_id`` - if ``None``, the events of all tenants match,
        * ``entity_id`` - :class:`eventlog.model.EntityId`; type and id are matched together,
          so both must be set (``ValueError`` otherwise),
        * ``event_type``,
        * the time range and id offset of the ``page_link``.

        :param page_link: :class:`eventlog.model.TimePageLink`, the range, order and size
            of the page.

        Returns a ``list`` of :class:`eventlog.model.Event` ordered by id (creation time),
        at most ``page_link.limit`` long.
        """
        criteria = self._time_criteria(page_link)
        criteria.eq('tenant_id', tenant_id)
        if entity_id is not None:
            if entity_id.entity_type is None or entity_id.id is None:
                raise ValueError('entity type and id must be given together, got %s/%s' %
                                 (entity_id.entity_type, entity_id.id))
            criteria.eq('entity_type', entity_id.entity_type)
            criteria.eq('entity_id', entity_id.id)
        criteria.eq('event_type', event_type)

        log.debug('Find events %s', criteria)
        return self.repository.scan(criteria,
                                    order_by=Sort('id', page_link.asc_order),
                                    limit=page_link.limit,
                                    offset=0)

    def _time_criteria(self, page_link):
        criteria = Criteria()
        if page_link.id_offset is not None:
            if page_link.asc_order:
                criteria.gt('id', page_link.id_offset)
            else:
                criteria.lt('id', page_link.id_offset)
        if page_link.start_time is not None:
            criteria.ge('id', ids.start_of(page_link.start_time))
        if page_link.end_time is not None:
            criteria.le('id', ids.end_of(page_link.end_time))
        return criteria

    def find_latest_events(self, tenant_id, entity_id, event_type, limit):
        """Returns the ``limit`` most recent events of the given type for an entity.

        :param tenant_id: ``str``, the tenant. ``None`` stands for the system tenant.
        :param entity_id: :class:`eventlog.model.EntityId`, the owning entity.
        :param event_type: ``str``, the event type.
        :param limit: ``int``, maximal number of events.

        Returns a ``list`` of :class:`eventlog.model.Event`, newest first.
        """
        if limit is None or limit < 1:
            raise ValueError('limit must be at least 1, got %s' % limit)
        match = {
            'tenant_id': tenant_id if tenant_id is not None else SYSTEM_TENANT_ID,
            'entity_type': entity_id.entity_type,
            'entity_id': entity_id.id,
            'event_type': event_type,
        }
        return self.repository.top_n(match, limit, order_by=Sort('id', False))

    def close(self):
        """Closes the underlying repository.
        """
        self.repository.close()
