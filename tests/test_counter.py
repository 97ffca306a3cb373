import asyncio
from concurrent.futures import ThreadPoolExecutor

from agency_api.app.services.counter_service import CounterService, format_id


def test_format_id_pads_to_two_digits():
    assert format_id("PROJECT", 1) == "PROJECT01"
    assert format_id("SERVICE", 42) == "SERVICE42"
    assert format_id("PROJECT", 100) == "PROJECT100"


def test_first_value_is_one_and_counters_are_independent():
    assert asyncio.run(CounterService.next_sequence("alpha")) == 1
    assert asyncio.run(CounterService.next_sequence("alpha")) == 2
    assert asyncio.run(CounterService.next_sequence("beta")) == 1
    assert asyncio.run(CounterService.next_id("alpha", "A")) == "A03"


def test_concurrent_increments_are_distinct_and_consecutive():
    workers = 8
    per_worker = 10

    def bump(_):
        return [asyncio.run(CounterService.next_sequence("shared")) for _ in range(per_worker)]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        values = [value for batch in pool.map(bump, range(workers)) for value in batch]

    assert sorted(values) == list(range(1, workers * per_worker + 1))
