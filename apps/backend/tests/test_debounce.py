"""防抖執行器測試"""

import threading
import time

from vault.core.debounce import Debouncer


def test_zero_delay_runs_synchronously():
    calls = []
    debouncer = Debouncer(lambda: calls.append(1), delay=0)

    debouncer.trigger()

    assert calls == [1]
    assert not debouncer.pending


def test_triggers_within_window_collapse_into_one_call():
    done = threading.Event()
    calls = []

    def func():
        calls.append(1)
        done.set()

    debouncer = Debouncer(func, delay=0.05)
    for _ in range(5):
        debouncer.trigger()

    assert done.wait(2)
    time.sleep(0.1)
    assert calls == [1]


def test_flush_waits_for_call_already_running():
    started = threading.Event()
    finished = []

    def slow():
        started.set()
        time.sleep(0.3)
        finished.append(1)

    debouncer = Debouncer(slow, delay=0.01)
    debouncer.trigger()
    assert started.wait(2)

    debouncer.flush()

    assert finished == [1]
    assert not debouncer.running


def test_cancelled_timer_never_fires():
    calls = []
    debouncer = Debouncer(lambda: calls.append(1), delay=0.05)

    debouncer.trigger()
    debouncer.cancel()
    time.sleep(0.15)

    assert calls == []


def test_failure_on_timer_thread_is_logged(caplog):
    done = threading.Event()

    def broken():
        done.set()
        raise RuntimeError("client has been closed")

    debouncer = Debouncer(broken, delay=0.01)
    debouncer.trigger()
    assert done.wait(2)

    deadline = time.monotonic() + 2
    while "防抖呼叫執行失敗" not in caplog.text and time.monotonic() < deadline:
        time.sleep(0.01)
    assert "防抖呼叫執行失敗" in caplog.text
    assert not debouncer.running
