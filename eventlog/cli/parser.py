"""
-------------------
eventlog.cli.parser
-------------------


Event log CLI main :mod:`argparse` parser.
"""
import argparse
from logging import getLogger

from eventlog.config import load_config
from eventlog.rdbs import create_repository
from eventlog.store import EventStore, shared_executor


log = getLogger(__name__)


def get_parent_parser(name, desc=''):
    """Creates the main (parent) :class:`argparse.ArgumentParser` for the event log CLI.

    Defines the main argument options such as the configuration file, the database
    URL, verbosity level etc.

    :param str name: the name of the program.
    :param str desc: program description.

    Returns the configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(prog=name, description=desc)

    parser.add_argument('-v', '--version',
                        help='Print program version and exit', action='store_true')
    parser.add_argument('-c', '--config', dest='config', metavar='FILE', default=None,
                        help='YAML configuration file')
    parser.add_argument('-U', '--db-url', dest='db_url', metavar='URL', default=None,
                        help='Database URL (SQLAlchemy form). Overrides the configuration file.')

    parser.add_argument('--verbose', dest='verbose', action='store_true',
                        help='Verbose output.')

    return parser


def open_store(args):
    """Creates an :class:`eventlog.store.EventStore` backed by the relational repository.

    The configuration file (``args.config``) is loaded first, then the command line
    options override it.

    :param argparse.Namespace args: parsed command-line arguments.
    """
    config = load_config(args.config, overrides={'db_url': args.db_url})
    repository = create_repository(db_url=config['db_url'], verbose=config['echo'])
    return EventStore(repository, executor=shared_executor(config['async_workers']))
