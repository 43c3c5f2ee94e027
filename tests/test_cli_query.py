from eventlog.cli.query import format_event, get_parser, run_find, DEFAULT_FORMAT
from eventlog.model import Event, EntityId, TimePageLink
from eventlog import ids
from argparse import ArgumentParser
from unittest import mock
import eventlog.cli.query
import pytest


def make_event():
    return Event(id=ids.from_timestamp(1546934400000 * 10000 + ids.UUID_EPOCH_OFFSET, 1, 2),
                 tenant_id='t1', entity_type='DEVICE', entity_id='d1',
                 event_type='LIFECYCLE', uid='u1', body={'state': 'on'})


def test_get_parser():
    parser = ArgumentParser()
    subparsers = parser.add_subparsers(dest='command')
    get_parser(subparsers)

    args = parser.parse_args(['find', '--tenant', 't1', '-a', '10', '-b', '20', '-l', '5', '-o', 'asc'])
    assert args.f_tenant == 't1'
    assert args.f_after == 10
    assert args.f_before == 20
    assert args.f_limit == 5
    assert args.f_order == 'asc'
    assert args.o_format == DEFAULT_FORMAT

    args = parser.parse_args(['latest', '--entity-type', 'DEVICE', '--entity-id', 'd1',
                              '--event-type', 'LIFECYCLE'])
    assert args.f_limit == 10
    assert args.f_tenant is None

    with pytest.raises(SystemExit):
        parser.parse_args(['get', '--entity-type', 'DEVICE'])


def test_format_event():
    ev = make_event()
    result = format_event(ev, '{created_time} {tenant_id} {entity_type}/{entity_id} {event_type} {uid} {body}')
    assert result == '1546934400000 t1 DEVICE/d1 LIFECYCLE u1 {"state": "on"}'


def test_format_event_with_date_format():
    result = format_event(make_event(), '{created_time}', datefmt='%Y-%m-%d %H:%M:%S')
    assert result == '2019-01-08 08:00:00'


def test_format_event_default_format():
    result = format_event(make_event(), DEFAULT_FORMAT)
    assert 'DEVICE/d1' in result
    assert 'LIFECYCLE' in result


@mock.patch.object(eventlog.cli.query, 'open_store')
def test_run_find(m_open_store, capsys):
    store = mock.MagicMock()
    store.find_events.return_value = [make_event()]
    m_open_store.return_value = store

    parser = ArgumentParser()
    get_parser(parser.add_subparsers(dest='command'))
    args = parser.parse_args(['find', '--entity-type', 'DEVICE', '--entity-id', 'd1',
                              '-a', '100', '-l', '3', '-F', '{uid}'])

    assert run_find(args) == 0
    assert capsys.readouterr().out == 'u1\n'

    call_args, call_kwargs = store.find_events.call_args
    tenant_id, entity_id, page_link = call_args
    assert tenant_id is None
    assert entity_id == EntityId('DEVICE', 'd1')
    assert isinstance(page_link, TimePageLink)
    assert page_link.limit == 3
    assert page_link.start_time == 100
    assert page_link.asc_order is False
    assert call_kwargs == {'event_type': None}
    assert store.close.call_count == 1


@mock.patch.object(eventlog.cli.query, 'open_store')
def test_run_find_entity_type_without_id(m_open_store):
    parser = ArgumentParser()
    get_parser(parser.add_subparsers(dest='command'))

    for argv in (['find', '--entity-type', 'DEVICE'], ['find', '--entity-id', 'd1']):
        with pytest.raises(ValueError):
            run_find(parser.parse_args(argv))

    assert m_open_store.call_count == 0
