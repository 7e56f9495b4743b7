"""Monotonic integer sequence for item identifiers.

Starts at 1, never reuses a value. Can be resumed from a persisted
"next value" after a restart.
"""

import threading


class SequenceGenerator:
    """Thread-safe counter handing out 1, 2, 3, ..."""

    def __init__(self, next_value: int = 1) -> None:
        if next_value < 1:
            raise ValueError(f"next_value must be >= 1, got {next_value}")
        self._next_value = next_value
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            value = self._next_value
            self._next_value += 1
            return value

    def peek(self) -> int:
        """Value the next call to next_id() will return."""
        return self._next_value
