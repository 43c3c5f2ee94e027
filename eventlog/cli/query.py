"""
------------------
eventlog.cli.query
------------------

Event log query command line interface: the ``get``, ``find`` and ``latest`` commands.
"""
import json
from datetime import datetime, timezone

from eventlog.cli.parser import open_store
from eventlog.model import EntityId, TimePageLink


DEFAULT_FORMAT = '{created_time} [{tenant_id}] {entity_type}/{entity_id} {event_type} ({uid}): {body}'


def _add_event_filters(parser, required):
    parser.add_argument('--tenant', dest='f_tenant', metavar='TENANT_ID', default=None,
                        help='Tenant id. System tenant if not given.' if required else
                        'Tenant id. All tenants if not given.')
    parser.add_argument('--entity-type', dest='f_entity_type', metavar='TYPE',
                        required=required, default=None, help='Owning entity type')
    parser.add_argument('--entity-id', dest='f_entity_id', metavar='ID',
                        required=required, default=None, help='Owning entity id')
    parser.add_argument('--event-type', dest='f_event_type', metavar='TYPE',
                        required=required, default=None, help='Event type')


def _add_output_format(parser):
    parser.add_argument('-F', '--format-output', dest='o_format', default=DEFAULT_FORMAT,
                        metavar='FORMAT_STRING', help='Event output format string. ' +
                        'Available properties are: id, created_time, tenant_id, entity_type, ' +
                        'entity_id, event_type, uid and body.')
    parser.add_argument('-T', '--format-timestamp', dest='o_ts_format', default=None,
                        metavar='DATE_FORMAT_STRING',
                        help='Timestamp strftime compatible format string')


def get_parser(subparsers):
    """Configures the subparsers for the ``get``, ``find`` and ``latest`` commands.

    :param argparse.ArgumentParser subparser: subparser for commands.
    """
    get_cmd = subparsers.add_parser('get', help='Get event by tenant, entity, type and uid')
    _add_event_filters(get_cmd, required=True)
    get_cmd.add_argument('--uid', dest='f_uid', required=True, help='Event uid')
    _add_output_format(get_cmd)

    find_cmd = subparsers.add_parser('find', help='Find events in a time range')
    _add_event_filters(find_cmd, required=False)
    find_cmd.add_argument('-a', '--after', dest='f_after', metavar='TIMESTAMP', default=None,
                          type=int, help='Match events created at or after this time (ms)')
    find_cmd.add_argument('-b', '--before', dest='f_before', metavar='TIMESTAMP', default=None,
                          type=int, help='Match events created at or before this time (ms)')
    find_cmd.add_argument('--offset', dest='f_offset', metavar='EVENT_ID', default=None,
                          help='Continue after (asc) or before (desc) this event id')
    find_cmd.add_argument('-l', '--limit', dest='f_limit', default=100, type=int,
                          help='Maximal number of events')
    find_cmd.add_argument('-o', '--order', dest='f_order', default='desc',
                          choices=('asc', 'desc'), help='Order of results')
    _add_output_format(find_cmd)

    latest_cmd = subparsers.add_parser('latest', help='Most recent events of an entity')
    _add_event_filters(latest_cmd, required=True)
    latest_cmd.add_argument('-l', '--limit', dest='f_limit', default=10, type=int,
                            help='Maximal number of events')
    _add_output_format(latest_cmd)

    return get_cmd, find_cmd, latest_cmd


def format_event(event, fmt, datefmt=None):
    """Format the event using the provided format.

    :param eventlog.model.Event event: the event to format.
    :param str fmt: the format string. This is compatibile with :func:`str.format`.
    :param str datefmt: alternative date format for formatting the event creation time.
        The format must be compatible with :func:`datetime.strftime`

    Returns the formatted event as string.
    """
    data = event.to_dict()
    data['body'] = json.dumps(event.body)
    data['created_time'] = event.created_time
    if datefmt and event.created_time is not None:
        event_time = datetime.fromtimestamp(event.created_time / 1000, tz=timezone.utc)
        data['created_time'] = event_time.strftime(datefmt)

    return fmt.format(**data)


def _print_events(events, args):
    for event in events:
        print(format_event(event, args.o_format, args.o_ts_format))


def _entity(args):
    if args.f_entity_type is None and args.f_entity_id is None:
        return None
    if args.f_entity_type is None or args.f_entity_id is None:
        raise ValueError('--entity-type and --entity-id must be given together')
    return EntityId(entity_type=args.f_entity_type, id=args.f_entity_id)


def run_get(args):
    """Looks up one event by its natural key and prints it.

    Returns the exit code: ``0`` if found, ``1`` if not.
    """
    store = open_store(args)
    try:
        event = store.find_event(args.f_tenant, _entity(args), args.f_event_type, args.f_uid)
    finally:
        store.close()
    if event is None:
        print('Event not found')
        return 1
    _print_events([event], args)
    return 0


def run_find(args):
    """Finds events in a time range and prints them.
    """
    page_link = TimePageLink(limit=args.f_limit,
                             start_time=args.f_after,
                             end_time=args.f_before,
                             asc_order=args.f_order == 'asc',
                             id_offset=args.f_offset)
    entity_id = _entity(args)
    store = open_store(args)
    try:
        events = store.find_events(args.f_tenant, entity_id, page_link,
                                   event_type=args.f_event_type)
    finally:
        store.close()
    _print_events(events, args)
    return 0


def run_latest(args):
    """Prints the most recent events of an entity.
    """
    store = open_store(args)
    try:
        events = store.find_latest_events(args.f_tenant, _entity(args), args.f_event_type,
                                          args.f_limit)
    finally:
        store.close()
    _print_events(events, args)
    return 0
