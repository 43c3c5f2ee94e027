"""
------------
eventlog.ids
------------

Time-based identifiers.

Every event is identified by a version 1 (time-based) UUID. The UUID carries a
60-bit timestamp (100ns intervals since 1582-10-15), so identifiers generated
later are "bigger" in time. The textual form of a UUID, however, starts with the
*low* bits of the timestamp, which makes plain string comparison useless for
ordering. This module provides a sortable form of the identifier in which the
timestamp bits come first, most significant first:

.. code-block:: python

    from eventlog import ids

    first = ids.time_based()
    second = ids.time_based()

    assert ids.to_sortable(first) < ids.to_sortable(second)
    assert ids.from_sortable(ids.to_sortable(first)) == first

It also provides the smallest (:func:`start_of`) and the largest (:func:`end_of`)
time UUID for a given millisecond, used to translate time ranges into identifier
ranges.
"""
import random
import time
import uuid
from threading import Lock


UUID_EPOCH_OFFSET = 0x01b21dd213814000
"""Number of 100ns intervals between 1582-10-15 (UUID epoch) and 1970-01-01 (Unix epoch)."""

_MIN_CLOCK_SEQ = 0
_MAX_CLOCK_SEQ = 0x3fff
_MIN_NODE = 0
_MAX_NODE = 0xffffffffffff


def from_timestamp(timestamp, clock_seq, node):
    """Builds a version 1 UUID from its raw parts.

    :param timestamp: ``int``, 60-bit timestamp in 100ns intervals since the UUID epoch.
    :param clock_seq: ``int``, 14-bit clock sequence.
    :param node: ``int``, 48-bit node identifier.

    Returns :class:`uuid.UUID`.
    """
    time_low = timestamp & 0xffffffff
    time_mid = (timestamp >> 32) & 0xffff
    time_hi_version = ((timestamp >> 48) & 0x0fff) | (1 << 12)
    clock_seq_hi_variant = ((clock_seq >> 8) & 0x3f) | 0x80
    clock_seq_low = clock_seq & 0xff
    return uuid.UUID(fields=(time_low, time_mid, time_hi_version,
                             clock_seq_hi_variant, clock_seq_low, node))


class TimeUUIDGenerator:
    """Generates time-based UUIDs that strictly increase within the process.

    If two UUIDs would end up with the same timestamp (the clock did not advance or
    went backwards), the timestamp of the later one is bumped by one interval.

    The instances of this class are thread-safe.

    :param node: ``int``, the node identifier. Defaults to :func:`uuid.getnode`.
    :param clock_seq: ``int``, the clock sequence. Random if not given.
    """
    def __init__(self, node=None, clock_seq=None):
        self.node = node if node is not None else uuid.getnode()
        self.clock_seq = clock_seq if clock_seq is not None else random.getrandbits(14)
        self.lock = Lock()
        self._last_timestamp = None

    def generate(self):
        """Returns a new time-based :class:`uuid.UUID`.
        """
        with self.lock:
            timestamp = time.time_ns() // 100 + UUID_EPOCH_OFFSET
            if self._last_timestamp is not None and timestamp <= self._last_timestamp:
                timestamp = self._last_timestamp + 1
            self._last_timestamp = timestamp
        return from_timestamp(timestamp, self.clock_seq, self.node)

    def __call__(self):
        return self.generate()


_default_generator = TimeUUIDGenerator()


def time_based():
    """Generates a new time-based UUID with the process-wide generator.
    """
    return _default_generator.generate()


def _check_time_based(value):
    if value.version != 1:
        raise ValueError('not a time-based UUID: %s' % value)


def unix_millis(value):
    """Extracts the creation time of a time-based UUID.

    Returns ``int``, milliseconds since the Unix epoch.
    """
    _check_time_based(value)
    return (value.time - UUID_EPOCH_OFFSET) // 10000


def start_of(millis):
    """The smallest time-based UUID (in sortable order) for the given millisecond.
    """
    return from_timestamp(millis * 10000 + UUID_EPOCH_OFFSET, _MIN_CLOCK_SEQ, _MIN_NODE)


def end_of(millis):
    """The largest time-based UUID (in sortable order) for the given millisecond.
    """
    return from_timestamp((millis + 1) * 10000 - 1 + UUID_EPOCH_OFFSET, _MAX_CLOCK_SEQ, _MAX_NODE)


def to_sortable(value):
    """Rearranges a time-based UUID so that the string order follows the creation time.

    The result is ``time_hi`` (without the version digit), ``time_mid``, ``time_low``,
    clock sequence and node, concatenated without dashes (31 hex characters).

    :param value: :class:`uuid.UUID`, must be a version 1 UUID.

    Raises ``ValueError`` for UUIDs that are not time-based.
    """
    _check_time_based(value)
    text = str(value)
    return text[15:18] + text[9:13] + text[0:8] + text[19:23] + text[24:]


def from_sortable(text):
    """Inverse of :func:`to_sortable`.
    """
    return uuid.UUID('%s-%s-1%s-%s-%s' % (text[7:15], text[3:7], text[0:3], text[15:19], text[19:]))
