import pytest
from engine.core.timers import TimerQueue

@pytest.fixture
def timers(manual_clock):
    return TimerQueue(manual_clock)

def test_callback_fires_when_due(timers, manual_clock):
    fired = []
    timers.schedule(2000, lambda: fired.append("battle"))

    manual_clock.advance(1999)
    assert timers.update() == 0
    assert fired == []

    manual_clock.advance(1)
    assert timers.update() == 1
    assert fired == ["battle"]

def test_callback_fires_once(timers, manual_clock):
    fired = []
    timers.schedule(100, lambda: fired.append(1))

    manual_clock.advance(500)
    timers.update()
    timers.update()

    assert fired == [1]
    assert len(timers) == 0

def test_same_due_time_fires_in_schedule_order(timers, manual_clock):
    fired = []
    timers.schedule(100, lambda: fired.append("a"))
    timers.schedule(100, lambda: fired.append("b"))
    timers.schedule(50, lambda: fired.append("early"))

    manual_clock.advance(100)
    timers.update()

    assert fired == ["early", "a", "b"]

def test_cancel(timers, manual_clock):
    fired = []
    handle = timers.schedule(100, lambda: fired.append(1))
    assert len(timers) == 1

    timers.cancel(handle)
    timers.cancel(None)
    assert len(timers) == 0

    manual_clock.advance(100)
    assert timers.update() == 0
    assert fired == []

def test_failing_callback_is_logged_not_raised(timers, manual_clock, caplog):
    fired = []

    def broken():
        raise RuntimeError("boom")

    timers.schedule(10, broken, name="broken")
    timers.schedule(10, lambda: fired.append(1))

    manual_clock.advance(10)
    timers.update()

    assert fired == [1]
    assert "broken" in caplog.text

def test_callbacks_scheduling_more_events(timers, manual_clock):
    fired = []
    timers.schedule(0, lambda: timers.schedule(0, lambda: fired.append("nested")))

    timers.update()
    assert fired == []

    timers.update()
    assert fired == ["nested"]

def test_negative_delay_is_due_immediately(timers):
    fired = []
    timers.schedule(-50, lambda: fired.append(1))
    timers.update()
    assert fired == [1]

def test_clear(timers, manual_clock):
    timers.schedule(10, lambda: None)
    timers.clear()
    assert len(timers) == 0
