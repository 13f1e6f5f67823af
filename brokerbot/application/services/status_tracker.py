"""
Application service: request / success / error counters for the status page.
Counters are updated from the event loop and read from the HTTP server
thread, so every access goes through one threading.Lock.
"""

import threading
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class StatusSnapshot:
    requests: int
    successes: int
    errors: int
    uptime_seconds: float
    build_version: str
    build_time: str


class StatusTracker:
    def __init__(self, build_version: str = "dev", build_time: str = "0") -> None:
        self._lock = threading.Lock()
        self._started = time.monotonic()
        self._requests = 0
        self._successes = 0
        self._errors = 0
        self._build_version = build_version
        self._build_time = build_time

    def record_request(self) -> int:
        with self._lock:
            self._requests += 1
            return self._requests

    def record_success(self) -> int:
        with self._lock:
            self._successes += 1
            return self._successes

    def record_error(self) -> int:
        with self._lock:
            self._errors += 1
            return self._errors

    def snapshot(self) -> StatusSnapshot:
        with self._lock:
            return StatusSnapshot(
                requests=self._requests,
                successes=self._successes,
                errors=self._errors,
                uptime_seconds=time.monotonic() - self._started,
                build_version=self._build_version,
                build_time=self._build_time,
            )
