"""
Timer Module

Measures time to first backend chunk and total stream duration for request logs.
"""

import time
from typing import Optional


class Timer:
    """
    Latency timer based on time.perf_counter()

    Example:
        timer = Timer().start()
        timer.mark_first_byte()
        timer.stop()
        logger.info("First chunk received: %sms", timer.first_byte_delay_ms)
    """

    def __init__(self):
        self._start_time: Optional[float] = None
        self._first_byte_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> "Timer":
        self._start_time = time.perf_counter()
        self._first_byte_time = None
        self._end_time = None
        return self

    def mark_first_byte(self) -> bool:
        """
        Record the first byte time.

        Returns:
            bool: True only for the call that actually recorded it
        """
        if self._first_byte_time is not None:
            return False
        self._first_byte_time = time.perf_counter()
        return True

    def stop(self) -> "Timer":
        self._end_time = time.perf_counter()
        return self

    @staticmethod
    def _delta_ms(start: Optional[float], end: Optional[float]) -> Optional[int]:
        if start is None or end is None:
            return None
        return int((end - start) * 1000)

    @property
    def first_byte_delay_ms(self) -> Optional[int]:
        return self._delta_ms(self._start_time, self._first_byte_time)

    @property
    def total_time_ms(self) -> Optional[int]:
        end = self._end_time if self._end_time is not None else time.perf_counter()
        return self._delta_ms(self._start_time, end)
