"""Monotonic migration timestamps."""

from datetime import datetime, timedelta, timezone
from typing import Optional

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class TimestampAllocator:
    """Cursor over a base instant; every ``next()`` advances one quantum.

    Owned by a single ordering run. The encoded values are fixed width
    (YYYYMMDDHHMMSS), so lexical order equals allocation order.
    """

    def __init__(self, base: Optional[datetime] = None, quantum_seconds: int = 30):
        if quantum_seconds <= 0:
            raise ValueError(f"quantum_seconds must be positive, got {quantum_seconds}")
        self.cursor = (base or datetime.now(timezone.utc)).replace(microsecond=0)
        self.quantum = timedelta(seconds=quantum_seconds)
        self.allocated = 0

    def next(self) -> str:
        self.cursor = self.cursor + self.quantum
        self.allocated += 1
        return self.encode(self.cursor)

    @staticmethod
    def encode(instant: datetime) -> str:
        return instant.strftime(TIMESTAMP_FORMAT)

    @staticmethod
    def decode(value: str) -> datetime:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
