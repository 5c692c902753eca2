import matplotlib

matplotlib.use("Agg")

import pytest

from mandelzoom import Gradient


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class _ManualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False


class ManualScheduler:
    """Scheduler whose timers only fire when the test advances the clock."""

    def __init__(self, clock, honour_cancel=True):
        self.clock = clock
        self.honour_cancel = honour_cancel
        self.timers = []

    def call_later(self, delay, callback):
        timer = _ManualTimer(self.clock.now + delay, callback)
        self.timers.append(timer)
        return timer

    def cancel(self, handle):
        handle.cancelled = True

    @property
    def outstanding(self):
        return [t for t in self.timers if not (t.cancelled or t.fired)]

    def advance(self, seconds):
        self.clock.now += seconds
        for timer in sorted(self.timers, key=lambda t: t.due):
            if timer.fired or timer.due > self.clock.now:
                continue
            if timer.cancelled and self.honour_cancel:
                continue
            timer.fired = True
            timer.callback()


class RecordingPresenter:
    def __init__(self):
        self.hints = []
        self.cleared = 0
        self.presented = []

    def show_zoom_hint(self, zoom_factor, origin_x, origin_y):
        self.hints.append((zoom_factor, origin_x, origin_y))

    def clear_zoom_hint(self):
        self.cleared += 1

    def present(self, target):
        self.presented.append(target)


@pytest.fixture(scope="session")
def gradient():
    return Gradient.from_colormap("turbo")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def presenter():
    return RecordingPresenter()
