"""
-----------------
eventlog.cli.save
-----------------

Event log ``save`` command line interface.
"""
import json

from eventlog.cli.parser import open_store
from eventlog.cli.query import DEFAULT_FORMAT, format_event
from eventlog.model import Event


def get_parser(subparsers):
    """Configures the subparser for the ``save`` command.

    :param argparse.ArgumentParser subparser: subparser for commands.

    Returns :class:`argparse.ArgumentParser` configured for the ``save`` command.
    """
    parser = subparsers.add_parser('save', help='Save an event')

    parser.add_argument('--tenant', dest='e_tenant', metavar='TENANT_ID', default=None,
                        help='Tenant id. System tenant if not given.')
    parser.add_argument('--entity-type', dest='e_entity_type', metavar='TYPE', required=True,
                        help='Owning entity type')
    parser.add_argument('--entity-id', dest='e_entity_id', metavar='ID', required=True,
                        help='Owning entity id')
    parser.add_argument('--event-type', dest='e_event_type', metavar='TYPE', required=True,
                        help='Event type')
    parser.add_argument('--uid', dest='e_uid', default=None,
                        help='Event uid (de-duplication key). Defaults to the event id.')
    parser.add_argument('--body', dest='e_body', metavar='JSON', default=None,
                        help='Event body, as JSON')
    parser.add_argument('--if-not-exists', dest='if_not_exists', action='store_true',
                        help='Save only if the entity has no events yet.')
    parser.add_argument('-F', '--format-output', dest='o_format', default=DEFAULT_FORMAT,
                        metavar='FORMAT_STRING', help='Output format string for the saved event.')

    return parser


def run_save(args):
    """Saves an event built from the command-line arguments and prints it.

    Returns the exit code: ``0`` if saved, ``1`` if ``--if-not-exists`` was given and the
    entity already has events.
    """
    body = json.loads(args.e_body) if args.e_body is not None else None
    event = Event(tenant_id=args.e_tenant,
                  entity_type=args.e_entity_type,
                  entity_id=args.e_entity_id,
                  event_type=args.e_event_type,
                  uid=args.e_uid,
                  body=body)

    store = open_store(args)
    try:
        if args.if_not_exists:
            saved = store.save_if_not_exists(event)
        else:
            saved = store.save(event)
    finally:
        store.close()

    if saved is None:
        print('Entity %s/%s already has events, nothing saved' % (event.entity_type, event.entity_id))
        return 1
    print(format_event(saved, args.o_format))
    return 0
