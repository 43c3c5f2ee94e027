from eventlog import ids
from datetime import datetime, timezone
from threading import Thread
import uuid
import pytest


def test_time_based_is_version_1():
    value = ids.time_based()
    assert isinstance(value, uuid.UUID)
    assert value.version == 1


def test_time_based_strictly_increasing():
    generated = [ids.time_based() for _ in range(1000)]
    sortable = [ids.to_sortable(u) for u in generated]
    assert sortable == sorted(sortable)
    assert len(set(sortable)) == len(sortable)


def test_generator_unique_across_threads():
    gen = ids.TimeUUIDGenerator(node=1, clock_seq=1)
    results = []

    def generate():
        for _ in range(200):
            results.append(gen.generate())

    threads = [Thread(target=generate) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(results)) == 800


def test_generator_is_callable():
    gen = ids.TimeUUIDGenerator()
    assert gen().version == 1


def test_sortable_round_trip():
    value = ids.time_based()
    text = ids.to_sortable(value)
    assert len(text) == 31
    assert ids.from_sortable(text) == value


def test_sortable_rejects_random_uuid():
    with pytest.raises(ValueError):
        ids.to_sortable(uuid.uuid4())


def test_unix_millis():
    before = int(datetime.now(timezone.utc).timestamp() * 1000)
    value = ids.time_based()
    after = int(datetime.now(timezone.utc).timestamp() * 1000)
    assert before - 1 <= ids.unix_millis(value) <= after + 1


def test_start_and_end_of_bound_the_millisecond():
    millis = 1546934400000
    inside = ids.from_timestamp(millis * 10000 + ids.UUID_EPOCH_OFFSET + 5000, 123, 456)

    assert ids.unix_millis(ids.start_of(millis)) == millis
    assert ids.unix_millis(ids.end_of(millis)) == millis
    assert ids.to_sortable(ids.start_of(millis)) <= ids.to_sortable(inside) <= ids.to_sortable(ids.end_of(millis))
    assert ids.to_sortable(ids.end_of(millis - 1)) < ids.to_sortable(ids.start_of(millis))
    assert ids.to_sortable(ids.end_of(millis)) < ids.to_sortable(ids.start_of(millis + 1))


def test_epoch_time_uuid():
    assert str(ids.start_of(0)).startswith('13814000-1dd2-11b2-')
