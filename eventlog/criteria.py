"""
-----------------
eventlog.criteria
-----------------

Conjunctive filter criteria over named event fields.

A :class:`Criteria` accumulates independent predicates. Each predicate is added
only if its value is given (not ``None``), so optional filters can be chained
without branching:

.. code-block:: python

    criteria = (Criteria()
                .eq('tenant_id', tenant_id)        # skipped if tenant_id is None
                .eq('event_type', event_type)
                .ge('id', ids.start_of(start_time)))

The repositories translate the predicates into their own terms and combine them
with a logical AND. An empty criteria matches everything.
"""
import operator
from collections import namedtuple


FIELDS = ('id', 'tenant_id', 'entity_type', 'entity_id', 'event_type', 'uid')
"""Event fields that can be used in criteria and sorting."""

OPERATORS = {
    'eq': operator.eq,
    'gt': operator.gt,
    'ge': operator.ge,
    'lt': operator.lt,
    'le': operator.le,
}
"""Supported comparison operators.

The same functions work for plain Python values and for SQLAlchemy columns.
"""


Predicate = namedtuple('Predicate', ['field', 'op', 'value'])
"""Single comparison ``<field> <op> <value>``."""


Sort = namedtuple('Sort', ['field', 'ascending'])
"""Ordering of results by a single field."""


class Criteria:
    """Builder for AND-combined predicates.

    :param predicates: ``list`` of :class:`Predicate`, optional initial predicates.
    """
    def __init__(self, predicates=None):
        self.predicates = list(predicates or [])

    def add(self, field, op, value):
        """Adds a predicate, unless ``value`` is ``None``.

        Returns this :class:`Criteria` to allow chaining.
        """
        if field not in FIELDS:
            raise ValueError('unknown field %s' % field)
        if op not in OPERATORS:
            raise ValueError('unknown operator %s' % op)
        if value is not None:
            self.predicates.append(Predicate(field=field, op=op, value=value))
        return self

    def eq(self, field, value):
        return self.add(field, 'eq', value)

    def gt(self, field, value):
        return self.add(field, 'gt', value)

    def ge(self, field, value):
        return self.add(field, 'ge', value)

    def lt(self, field, value):
        return self.add(field, 'lt', value)

    def le(self, field, value):
        return self.add(field, 'le', value)

    def matches(self, event, key=None):
        """Checks an event against all predicates.

        :param event: :class:`eventlog.model.Event`, the event to check.
        :param key: ``function``, optional, ``key(field, value)`` that converts both sides of
            each comparison to comparable values.

        Returns ``True`` only if *all* predicates hold.
        """
        for predicate in self.predicates:
            actual = getattr(event, predicate.field)
            expected = predicate.value
            if key is not None:
                actual = key(predicate.field, actual)
                expected = key(predicate.field, expected)
            if actual is None or not OPERATORS[predicate.op](actual, expected):
                return False
        return True

    def __iter__(self):
        return iter(self.predicates)

    def __len__(self):
        return len(self.predicates)

    def __repr__(self):
        return 'Criteria<%s>' % ' AND '.join('%s %s %r' % p for p in self.predicates)
