"""
-----------------
eventlog.storeapi
-----------------

Record Repository API
^^^^^^^^^^^^^^^^^^^^^

Defines the interface and the exceptions to be used when implementing a storage
backend for :class:`eventlog.store.EventStore`.
"""
from abc import ABC, abstractmethod

from eventlog.criteria import Sort


class RecordRepository(ABC):
    """RecordRepository is the physical storage of the events.

    The repository stores and retrieves :class:`eventlog.model.Event` objects. It does
    not complete or validate the events; that is done by the
    :class:`eventlog.store.EventStore` before delegating here.

    Fields used in criteria, exact matches and sorting are the event attribute names
    (see :data:`eventlog.criteria.FIELDS`). Comparisons on ``id`` follow the creation
    time (see :func:`eventlog.ids.to_sortable`).

    Implementations must be thread-safe.
    """
    @abstractmethod
    def upsert(self, event):
        """Writes the event unconditionally, keyed by its ``id``.

        If an event with the same ``id`` exists, it is replaced. The write of a single
        event is atomic.

        :param event: :class:`eventlog.model.Event`, a completed event.

        Returns the persisted :class:`eventlog.model.Event`.
        """
        pass

    @abstractmethod
    def find_one(self, key):
        """Looks up an event by its natural key.

        :param key: :class:`eventlog.model.EventKey`, all five fields are matched exactly.

        Returns the matching :class:`eventlog.model.Event`, or ``None`` if there is no match.
        If more than one event matches, any one of them is returned.
        """
        pass

    @abstractmethod
    def exists_by_tenant_entity(self, tenant_id, entity_type, entity_id):
        """Checks whether any event exists for the given tenant and owning entity.

        Returns ``bool``.
        """
        pass

    @abstractmethod
    def scan(self, criteria, order_by, limit, offset=0):
        """Searches the events matching the criteria.

        :param criteria: :class:`eventlog.criteria.Criteria`, AND-combined predicates.
        :param order_by: :class:`eventlog.criteria.Sort`, the ordering of the results.
        :param limit: ``int``, maximal number of results.
        :param offset: ``int``, number of matched results to skip.

        Returns a ``list`` of :class:`eventlog.model.Event`, possibly empty.
        """
        pass

    @abstractmethod
    def top_n(self, match, limit, order_by=Sort('id', False)):
        """Returns the first ``limit`` events that match exactly the given field values.

        :param match: ``dict``, field name to required value.
        :param limit: ``int``, maximal number of results.
        :param order_by: :class:`eventlog.criteria.Sort`, by default the newest events first.

        Returns a ``list`` of :class:`eventlog.model.Event`, possibly empty.
        """
        pass

    def insert_if_absent(self, event):
        """Inserts the event only if no event exists for its tenant and owning entity.

        The existence check looks at ``(tenant_id, entity_type, entity_id)`` only.

        **Note:**
            This default implementation checks and then inserts in two separate steps
            and is *not* atomic. Two concurrent callers may both see no event and both
            insert, leaving two events for the same entity (or a
            :class:`ConstraintViolation`, if the backend enforces a constraint on the
            key). Implementations that can insert conditionally in a single step must
            override this method.

        Returns the persisted :class:`eventlog.model.Event`, or ``None`` if an event
        already existed.
        """
        if self.exists_by_tenant_entity(event.tenant_id, event.entity_type, event.entity_id):
            return None
        return self.upsert(event)

    def close(self):
        """Close and cleanup the underlying storage.
        """
        pass


class StorageException(Exception):
    """General storage error.
    """
    pass


class StorageUnavailable(StorageException):
    """The underlying storage cannot be reached or timed out.
    """
    pass


class ConstraintViolation(StorageException):
    """The underlying storage rejected a write because of a constraint (duplicate key etc).
    """
    pass
