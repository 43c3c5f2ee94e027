"""
--------------
eventlog.model
--------------

Event model and the value objects used to look events up.
"""
import uuid
from collections import namedtuple

from eventlog.ids import unix_millis


EntityId = namedtuple('EntityId', ['entity_type', 'id'])
"""Reference to the domain entity that owns an event.
"""

EntityId.entity_type.__doc__ = """
    ``str``, the type of the entity, for example ``DEVICE``.
"""

EntityId.id.__doc__ = """
    ``str``, the identifier of the entity.
"""


EventKey = namedtuple('EventKey', ['tenant_id', 'entity_type', 'entity_id', 'event_type', 'event_uid'])
"""The natural key of an event, used for exact-match lookups.

The key is not unique in the storage; if more than one event matches, any one of
them may be returned.
"""


class Event:
    """A record of something that happened to an entity.

    Events are built by the caller with some of the fields unset, then completed
    (``id``, ``uid``, ``tenant_id``) by :class:`eventlog.store.EventStore` when saved.
    Events compare equal by value and are not hashable; use ``event.id`` or
    ``event.key`` as a set member or dictionary key.

    :param id: :class:`uuid.UUID` or ``str``, time-based identifier. Assigned on save if not set.
    :param tenant_id: ``str``, the owning tenant. The system tenant is used if not set.
    :param entity_type: ``str``, type of the owning entity.
    :param entity_id: ``str``, identifier of the owning entity.
    :param event_type: ``str``, what happened.
    :param uid: ``str``, de-duplication key. Defaults to ``str(id)`` on save.
    :param body: the event payload; any JSON-serializable value.
    """
    def __init__(self, id=None, tenant_id=None, entity_type=None, entity_id=None,
                 event_type=None, uid=None, body=None):
        if isinstance(id, str):
            id = uuid.UUID(id)
        self.id = id
        self.tenant_id = tenant_id
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.event_type = event_type
        self.uid = uid
        self.body = body

    @property
    def entity(self):
        """The owning entity as :class:`EntityId`.
        """
        return EntityId(entity_type=self.entity_type, id=self.entity_id)

    @property
    def created_time(self):
        """Creation time in milliseconds since the Unix epoch, taken from the ``id``.
        ``None`` if the event has no ``id`` yet.
        """
        if self.id is None:
            return None
        return unix_millis(self.id)

    @property
    def key(self):
        """The natural key (:class:`EventKey`) of this event.
        """
        return EventKey(tenant_id=self.tenant_id,
                        entity_type=self.entity_type,
                        entity_id=self.entity_id,
                        event_type=self.event_type,
                        event_uid=self.uid)

    def to_dict(self):
        return {
            'id': str(self.id) if self.id is not None else None,
            'tenant_id': self.tenant_id,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'event_type': self.event_type,
            'uid': self.uid,
            'body': self.body,
        }

    def __eq__(self, obj):
        if not isinstance(obj, Event):
            return False
        return self.to_dict() == obj.to_dict()

    # Completed in place on save.
    __hash__ = None

    def __repr__(self):
        return 'Event<%s %s %s/%s @ %s>' % (self.id, self.event_type, self.entity_type,
                                           self.entity_id, self.tenant_id)

    def __str__(self):
        return self.__repr__()


class TimePageLink:
    """Describes a single page of a time-ordered query.

    :param limit: ``int``, maximal number of results. Must be at least 1.
    :param start_time: ``int``, optional, milliseconds since the Unix epoch. Matches events
        created at or after this time.
    :param end_time: ``int``, optional, milliseconds since the Unix epoch. Matches events
        created at or before this time.
    :param asc_order: ``bool``, ``True`` for oldest first, ``False`` (default) for newest first.
    :param id_offset: :class:`uuid.UUID`, optional, exclusive bound. Matches only events after
        it (ascending) or before it (descending). Useful to continue from the last event of
        a previous page.
    """
    def __init__(self, limit, start_time=None, end_time=None, asc_order=False, id_offset=None):
        if limit is None or limit < 1:
            raise ValueError('limit must be at least 1, got %s' % limit)
        if isinstance(id_offset, str):
            id_offset = uuid.UUID(id_offset)
        self.limit = limit
        self.start_time = start_time
        self.end_time = end_time
        self.asc_order = asc_order
        self.id_offset = id_offset

    def __repr__(self):
        return 'TimePageLink<limit=%d start=%s end=%s asc=%s offset=%s>' % (
            self.limit, self.start_time, self.end_time, self.asc_order, self.id_offset)
