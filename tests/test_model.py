from eventlog.model import Event, EntityId, EventKey, TimePageLink
from eventlog import ids
import uuid
import pytest


def test_event_defaults():
    ev = Event(entity_type='DEVICE', entity_id='d1', event_type='LIFECYCLE')
    assert ev.id is None
    assert ev.uid is None
    assert ev.tenant_id is None
    assert ev.created_time is None
    assert ev.entity == EntityId('DEVICE', 'd1')


def test_event_id_from_string():
    value = ids.time_based()
    ev = Event(id=str(value))
    assert ev.id == value
    assert ev.created_time == ids.unix_millis(value)


def test_event_key():
    ev = Event(tenant_id='t', entity_type='DEVICE', entity_id='d1', event_type='LIFECYCLE', uid='abc')
    assert ev.key == EventKey('t', 'DEVICE', 'd1', 'LIFECYCLE', 'abc')


def test_event_equality():
    value = ids.time_based()
    ev1 = Event(id=value, tenant_id='t', entity_type='DEVICE', entity_id='d1',
                event_type='LIFECYCLE', uid='u', body={'a': 1})
    ev2 = Event(id=value, tenant_id='t', entity_type='DEVICE', entity_id='d1',
                event_type='LIFECYCLE', uid='u', body={'a': 1})
    assert ev1 == ev2

    ev2.body = {'a': 2}
    assert ev1 != ev2
    assert ev1 != 'not an event'


def test_time_page_link_defaults():
    link = TimePageLink(limit=10)
    assert link.asc_order is False
    assert link.start_time is None
    assert link.end_time is None
    assert link.id_offset is None


def test_time_page_link_offset_from_string():
    value = ids.time_based()
    link = TimePageLink(limit=1, id_offset=str(value))
    assert link.id_offset == value
    assert isinstance(link.id_offset, uuid.UUID)


def test_time_page_link_invalid_limit():
    with pytest.raises(ValueError):
        TimePageLink(limit=0)


def test_event_is_not_hashable():
    ev = Event(tenant_id='t', entity_type='DEVICE', entity_id='d1', event_type='LIFECYCLE')
    with pytest.raises(TypeError):
        hash(ev)
    with pytest.raises(TypeError):
        set([ev])

    ev.id = ids.time_based()
    assert {ev.id: ev}[ev.id] is ev
