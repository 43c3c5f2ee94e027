"""
-------------
eventlog.rdbs
-------------

Relational database RecordRepository implementation.
"""
from contextlib import contextmanager
from logging import getLogger

from sqlalchemy import JSON, Column, Index, String, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (IntegrityError,
                            InterfaceError,
                            OperationalError,
                            SQLAlchemyError,
                            TimeoutError as PoolTimeoutError)
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from eventlog.criteria import OPERATORS, Sort
from eventlog.ids import from_sortable, to_sortable
from eventlog.model import Event
from eventlog.storeapi import (RecordRepository,
                               StorageException,
                               StorageUnavailable,
                               ConstraintViolation)


log = getLogger(__name__)

Base = declarative_base()


class EventRecord(Base):
    """SQLAlchemy model representing the event.

    The ``id`` holds the sortable form of the time-based UUID (see
    :func:`eventlog.ids.to_sortable`), so ordering by ``id`` orders by creation time.
    """

    __tablename__ = 'events'

    id = Column(String(31), primary_key=True)
    tenant_id = Column(String, nullable=False)
    entity_type = Column(String)
    entity_id = Column(String)
    event_type = Column(String)
    event_uid = Column(String)
    body = Column(JSON)

    __table_args__ = (
        Index('idx_events_natural_key', 'tenant_id', 'entity_type', 'entity_id', 'event_type', 'event_uid'),
        Index('idx_events_tenant_entity', 'tenant_id', 'entity_type', 'entity_id'),
    )

    def __repr__(self):
        return 'EventRecord<%s %s>' % (self.id, self.event_type)

    def __str__(self):
        return self.__repr__()

    def __eq__(self, obj):
        if obj is None:
            return False
        if not isinstance(obj, EventRecord):
            return False
        return self.id == obj.id

    def __hash__(self):
        return hash(self.id)


_COLUMNS = {
    'id': EventRecord.id,
    'tenant_id': EventRecord.tenant_id,
    'entity_type': EventRecord.entity_type,
    'entity_id': EventRecord.entity_id,
    'event_type': EventRecord.event_type,
    'uid': EventRecord.event_uid,
}


def to_record(event):
    """Converts :class:`eventlog.model.Event` to :class:`EventRecord`.
    """
    return EventRecord(id=to_sortable(event.id),
                       tenant_id=event.tenant_id,
                       entity_type=event.entity_type,
                       entity_id=event.entity_id,
                       event_type=event.event_type,
                       event_uid=event.uid,
                       body=event.body)


def to_event(record):
    """Converts :class:`EventRecord` to :class:`eventlog.model.Event`.
    """
    return Event(id=from_sortable(record.id),
                 tenant_id=record.tenant_id,
                 entity_type=record.entity_type,
                 entity_id=record.entity_id,
                 event_type=record.event_type,
                 uid=record.event_uid,
                 body=record.body)


def _column_value(field, value):
    if field == 'id':
        return to_sortable(value)
    return value


class RDBSRecordRepository(RecordRepository):
    """RecordRepository that persists the events in a relational database.

    The implementation relies on SQLAlchemy ORM framework. Each operation runs in its
    own session.

    :meth:`insert_if_absent` uses the default check-then-insert sequence, which is not
    atomic. There is no unique constraint on ``(tenant_id, entity_type, entity_id)``,
    so two concurrent callers may both insert an event for the same entity.

    SQLAlchemy errors are translated:

    * :class:`sqlalchemy.exc.IntegrityError` to :class:`eventlog.storeapi.ConstraintViolation`
    * connection and pool errors to :class:`eventlog.storeapi.StorageUnavailable`
    * any other to :class:`eventlog.storeapi.StorageException`

    :param session_factory: the SQLAlchemy SessionMaker function.
    """

    def __init__(self, session_factory, engine=None):
        self.session_factory = session_factory
        self.engine = engine

    @contextmanager
    def _session(self):
        """Opens new session and translates the storage errors.
        """
        sess = self.session_factory()
        try:
            yield sess
        except IntegrityError as e:
            sess.rollback()
            raise ConstraintViolation(str(e)) from e
        except (OperationalError, InterfaceError, PoolTimeoutError) as e:
            raise StorageUnavailable(str(e)) from e
        except SQLAlchemyError as e:
            sess.rollback()
            raise StorageException(str(e)) from e
        finally:
            sess.close()

    def upsert(self, event):
        """Stores the event, replacing any event with the same id.

        :param event: :class:`eventlog.model.Event`, the event to save.

        Returns the saved event.
        """
        with self._session() as sess:
            sess.merge(to_record(event))
            sess.commit()
        log.debug('Stored event %s', event.id)
        return event

    def find_one(self, key):
        with self._session() as sess:
            record = sess.query(EventRecord).filter_by(tenant_id=key.tenant_id,
                                                       entity_type=key.entity_type,
                                                       entity_id=key.entity_id,
                                                       event_type=key.event_type,
                                                       event_uid=key.event_uid).first()
            if record is None:
                return None
            return to_event(record)

    def exists_by_tenant_entity(self, tenant_id, entity_type, entity_id):
        with self._session() as sess:
            qry = sess.query(EventRecord.id).filter_by(tenant_id=tenant_id,
                                                       entity_type=entity_type,
                                                       entity_id=entity_id)
            return qry.first() is not None

    def scan(self, criteria, order_by, limit, offset=0):
        """Searches through the stored events.

        :param criteria: :class:`eventlog.criteria.Criteria`, translated to SQL ``WHERE`` clauses.
        :param order_by: :class:`eventlog.criteria.Sort`, translated to ``ORDER BY``.
        :param limit: ``int``, maximal number of results.
        :param offset: ``int``, number of results to skip.

        Returns a ``list`` of :class:`eventlog.model.Event`.
        """
        clauses = [OPERATORS[p.op](_COLUMNS[p.field], _column_value(p.field, p.value))
                   for p in criteria]
        with self._session() as sess:
            qry = sess.query(EventRecord).filter(*clauses)
            qry = qry.order_by(self._ordering(order_by))
            return [to_event(record) for record in qry.offset(offset).limit(limit).all()]

    def top_n(self, match, limit, order_by=Sort('id', False)):
        columns = {_COLUMNS[field].key: _column_value(field, value) for field, value in match.items()}
        with self._session() as sess:
            qry = sess.query(EventRecord).filter_by(**columns)
            qry = qry.order_by(self._ordering(order_by))
            return [to_event(record) for record in qry.limit(limit).all()]

    def _ordering(self, order_by):
        column = _COLUMNS[order_by.field]
        return column.asc() if order_by.ascending else column.desc()

    def close(self):
        """Disposes the connection pool of the underlying engine, if any.
        """
        if self.engine is not None:
            self.engine.dispose()


def _engine_options(db_url):
    """In-memory SQLite databases live in a single connection; share it across threads.
    """
    url = make_url(db_url)
    if url.get_backend_name() == 'sqlite' and url.database in (None, '', ':memory:'):
        return {'poolclass': StaticPool, 'connect_args': {'check_same_thread': False}}
    return {}


def create_repository(db_url, verbose=False):
    """Creates new RDBSRecordRepository.

    Creates the ``events`` table if it does not exist.

    :param db_url(str): The database URL in SQLAlchemy form.
    :param verbose(bool): ``True`` to log the SQL statements.

    Returns RDBSRecordRepository object.
    """
    engine = create_engine(db_url, echo=verbose, **_engine_options(db_url))
    try:
        Base.metadata.create_all(engine)
    except OperationalError as e:
        raise StorageUnavailable(str(e)) from e
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    log.info('Event repository ready at %s', engine.url.render_as_string(hide_password=True))

    return RDBSRecordRepository(session_factory, engine=engine)
