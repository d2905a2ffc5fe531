"""
Timer Unit Tests
"""

from nim_proxy.common.timer import Timer


def test_first_byte_marked_once():
    timer = Timer().start()
    assert timer.mark_first_byte() is True
    first = timer.first_byte_delay_ms
    assert timer.mark_first_byte() is False
    assert timer.first_byte_delay_ms == first


def test_not_started():
    timer = Timer()
    assert timer.first_byte_delay_ms is None
    assert timer.total_time_ms is None


def test_total_time_running_and_stopped():
    timer = Timer().start()
    assert timer.total_time_ms >= 0
    stopped = timer.stop().total_time_ms
    assert stopped >= 0
    assert timer.total_time_ms == stopped
