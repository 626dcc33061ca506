"""Tests for migration timestamp allocation."""

from datetime import datetime, timedelta, timezone

import pytest

from schema_modeler.migration.timestamps import TimestampAllocator

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestTimestampAllocator:
    def test_first_allocation_is_one_quantum_after_base(self):
        allocator = TimestampAllocator(BASE)
        assert allocator.next() == "20240101000030"
        assert allocator.next() == "20240101000100"
        assert allocator.allocated == 2

    def test_custom_quantum(self):
        allocator = TimestampAllocator(BASE, quantum_seconds=3600)
        assert allocator.next() == "20240101010000"

    def test_rejects_non_positive_quantum(self):
        with pytest.raises(ValueError):
            TimestampAllocator(BASE, quantum_seconds=0)
        with pytest.raises(ValueError):
            TimestampAllocator(BASE, quantum_seconds=-30)

    def test_monotonic_and_lexically_ordered(self):
        allocator = TimestampAllocator(datetime(2024, 12, 31, 23, 58, tzinfo=timezone.utc))
        values = [allocator.next() for _ in range(10)]
        assert values == sorted(values)
        assert len(set(values)) == len(values)
        assert values[-1] == "20250101000300"
        instants = [TimestampAllocator.decode(v) for v in values]
        assert all(b - a == timedelta(seconds=30) for a, b in zip(instants, instants[1:]))

    def test_microseconds_dropped(self):
        allocator = TimestampAllocator(datetime(2024, 1, 1, 0, 0, 0, 999999, tzinfo=timezone.utc))
        assert allocator.next() == "20240101000030"

    def test_decode(self):
        assert TimestampAllocator.decode("20240101000030") == datetime(2024, 1, 1, 0, 0, 30)
        with pytest.raises(ValueError):
            TimestampAllocator.decode("2024-01-01")
