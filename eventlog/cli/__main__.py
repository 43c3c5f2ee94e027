import logging
import sys

from eventlog.cli import query, save
from eventlog.cli.parser import get_parent_parser
from eventlog.config import ConfigException
from eventlog.storeapi import StorageException


log = logging.getLogger(__name__)


def main(argv=None):
    parser = get_parent_parser('eventlog', 'Event log CLI')

    subparsers = parser.add_subparsers(dest='command', title='command', help='CLI commands')
    save.get_parser(subparsers)
    query.get_parser(subparsers)

    args = parser.parse_args(argv)

    if args.version:
        from eventlog.metadata import version
        print('eventlog', version)
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        if args.command == 'save':
            return save.run_save(args)
        elif args.command == 'get':
            return query.run_get(args)
        elif args.command == 'find':
            return query.run_find(args)
        elif args.command == 'latest':
            return query.run_latest(args)
    except (ConfigException, StorageException, ValueError) as e:
        log.debug('Command %s failed', args.command, exc_info=True)
        print('Error:', e, file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
