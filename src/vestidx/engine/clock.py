"""Time sources for ledgers."""

import time


def system_clock() -> int:
    """Wall-clock time in whole seconds."""
    return int(time.time())


class ManualClock:
    """Deterministic clock advanced explicitly (simulation and tests)."""

    def __init__(self, start: int = 0):
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self.now += int(seconds)
        return self.now

    def set(self, timestamp: int) -> int:
        if timestamp < self.now:
            raise ValueError(f"Clock cannot move backwards: {timestamp} < {self.now}")
        self.now = int(timestamp)
        return self.now
