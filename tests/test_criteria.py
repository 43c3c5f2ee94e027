from eventlog.criteria import Criteria, Predicate
from eventlog.model import Event
import pytest


def test_none_values_are_skipped():
    criteria = Criteria().eq('tenant_id', None).eq('event_type', 'LIFECYCLE').ge('id', None)
    assert len(criteria) == 1
    assert list(criteria) == [Predicate('event_type', 'eq', 'LIFECYCLE')]


def test_empty_criteria_matches_everything():
    assert Criteria().matches(Event(event_type='ANY'))


def test_matches_all_predicates():
    ev = Event(tenant_id='t1', entity_type='DEVICE', entity_id='d1', event_type='LIFECYCLE')
    assert Criteria().eq('tenant_id', 't1').eq('entity_id', 'd1').matches(ev)
    assert not Criteria().eq('tenant_id', 't1').eq('entity_id', 'd2').matches(ev)


def test_matches_with_key():
    ev = Event(event_type='b')
    criteria = Criteria().eq('event_type', 'B')
    assert not criteria.matches(ev)
    assert criteria.matches(ev, key=lambda field, value: value.upper())


def test_unset_field_never_matches():
    assert not Criteria().eq('uid', 'abc').matches(Event())


def test_unknown_field_and_operator():
    with pytest.raises(ValueError):
        Criteria().eq('content', 'x')
    with pytest.raises(ValueError):
        Criteria().add('uid', 'like', 'x')
