"""
Event log storage and query engine.

Stores immutable, timestamped events of tenants' entities and finds them by time
range or as the most recent ones. See :mod:`eventlog.store`.
"""
