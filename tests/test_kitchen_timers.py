import pytest

from kitchen_timers import ManualScheduler, TkScheduler


def test_callbacks_fire_in_due_order() -> None:
    scheduler = ManualScheduler()
    fired = []
    scheduler.schedule(2.0, lambda: fired.append("late"))
    scheduler.schedule(1.0, lambda: fired.append("early"))
    scheduler.schedule(1.0, lambda: fired.append("early-second"))

    assert scheduler.advance(0.5) == 0
    assert scheduler.advance(1.0) == 2
    assert fired == ["early", "early-second"]
    assert scheduler.advance(1.0) == 1
    assert fired[-1] == "late"
    assert scheduler.pending() == 0


def test_cancelled_handle_never_fires() -> None:
    scheduler = ManualScheduler()
    fired = []
    handle = scheduler.schedule(1.0, lambda: fired.append("x"))
    scheduler.cancel(handle)
    scheduler.cancel(None)
    assert scheduler.advance(5.0) == 0
    assert fired == []
    assert not handle.fired


def test_negative_delay_rejected() -> None:
    with pytest.raises(ValueError):
        ManualScheduler().schedule(-0.1, lambda: None)


class FakeWidget:
    def __init__(self) -> None:
        self.jobs = {}
        self.cancelled = []
        self._next = 0

    def after(self, ms, func):
        self._next += 1
        job_id = f"after#{self._next}"
        self.jobs[job_id] = (ms, func)
        return job_id

    def after_cancel(self, job_id) -> None:
        self.cancelled.append(job_id)
        self.jobs.pop(job_id, None)


def test_tk_scheduler_uses_after() -> None:
    widget = FakeWidget()
    scheduler = TkScheduler(widget)
    fired = []
    handle = scheduler.schedule(0.8, lambda: fired.append("go"))

    ((job_id, (ms, func)),) = widget.jobs.items()
    assert ms == 800
    func()
    assert fired == ["go"]
    assert handle.fired

    scheduler.cancel(handle)
    assert widget.cancelled == []


def test_tk_scheduler_cancel() -> None:
    widget = FakeWidget()
    scheduler = TkScheduler(widget)
    handle = scheduler.schedule(1.0, lambda: None)
    scheduler.cancel(handle)
    assert widget.cancelled == ["after#1"]
    assert widget.jobs == {}
