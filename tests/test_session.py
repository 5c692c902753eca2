import threading
import time

import pytest

from mandelzoom.config import CLASSIC, DEBOUNCE_SECONDS, SMOOTH, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from mandelzoom.renderer import render
from mandelzoom.session import RenderSession, ThreadTimerScheduler, wheel_zoom_factor
from mandelzoom.viewport import fit_canvas, scale_about_point

from conftest import ManualScheduler, RecordingPresenter

WIDTH, HEIGHT = 8, 6


class CountingRenderer:
    def __init__(self):
        self.viewports = []

    def __call__(self, viewport, *args, **kwargs):
        self.viewports.append(viewport)
        return render(viewport, *args, **kwargs)


@pytest.fixture
def renderer():
    return CountingRenderer()


@pytest.fixture
def session(presenter, scheduler, clock, renderer, gradient):
    return RenderSession(WIDTH, HEIGHT, presenter, scheduler, gradient=gradient, renderer=renderer, clock=clock)


def test_initial_state(session):
    assert session.state == "idle"
    assert session.pending is None
    assert session.viewport == fit_canvas(SMOOTH.bounds, WIDTH, HEIGHT)
    assert session.viewport.x_range / session.viewport.y_range == pytest.approx(WIDTH / HEIGHT)


def test_start_renders_and_presents(session, presenter, renderer):
    target = session.start()
    assert renderer.viewports == [session.viewport]
    assert presenter.presented == [target]
    assert target.pixels.shape == (HEIGHT, WIDTH, 4)
    assert session.render_count == 1


def test_zoom_is_deferred_until_debounce_expires(session, scheduler, presenter, renderer):
    initial = session.viewport
    pending = session.zoom(2.0, 3.0, ZOOM_IN_FACTOR)

    assert session.state == "pending"
    assert session.viewport == initial
    assert pending.target == scale_about_point(initial, WIDTH, HEIGHT, 2.0, 3.0, ZOOM_IN_FACTOR)
    assert presenter.hints == [(ZOOM_IN_FACTOR, 2.0 / WIDTH, 3.0 / HEIGHT)]
    assert renderer.viewports == []

    scheduler.advance(DEBOUNCE_SECONDS / 2)
    assert renderer.viewports == []

    scheduler.advance(DEBOUNCE_SECONDS / 2)
    assert session.state == "idle"
    assert session.viewport == pending.target
    assert renderer.viewports == [pending.target]
    assert presenter.cleared == 1
    assert len(presenter.presented) == 1


def test_burst_of_zooms_renders_only_the_last(session, scheduler, presenter, renderer):
    initial = session.viewport
    session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    scheduler.advance(0.05)
    session.zoom(6.0, 4.0, ZOOM_OUT_FACTOR)
    assert len(scheduler.outstanding) == 1

    scheduler.advance(DEBOUNCE_SECONDS)

    expected = scale_about_point(initial, WIDTH, HEIGHT, 6.0, 4.0, ZOOM_OUT_FACTOR)
    assert renderer.viewports == [expected]
    assert session.viewport == expected
    assert session.render_count == 1
    assert len(presenter.hints) == 2
    assert presenter.cleared == 1


def test_first_timer_restarted_by_second_event(session, scheduler, renderer):
    session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    scheduler.advance(0.15)
    session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    # The first deadline passes without a render.
    scheduler.advance(0.1)
    assert renderer.viewports == []
    scheduler.advance(DEBOUNCE_SECONDS)
    assert len(renderer.viewports) == 1


def test_stale_callback_cannot_commit(presenter, clock, renderer, gradient):
    # A scheduler that ignores cancel() still must not produce two renders.
    leaky = ManualScheduler(clock, honour_cancel=False)
    session = RenderSession(WIDTH, HEIGHT, presenter, leaky, gradient=gradient, renderer=renderer, clock=clock)
    initial = session.viewport

    session.zoom(0.0, 0.0, ZOOM_IN_FACTOR)
    leaky.advance(0.05)
    session.zoom(WIDTH, HEIGHT, ZOOM_IN_FACTOR)
    leaky.advance(1.0)

    assert renderer.viewports == [scale_about_point(initial, WIDTH, HEIGHT, WIDTH, HEIGHT, ZOOM_IN_FACTOR)]


def test_pending_records_request(session, clock):
    clock.now = 12.5
    pending = session.on_wheel(4.0, 2.0, -120.0)
    assert pending.scheduled_at == 12.5
    assert pending.request.zoom_factor == ZOOM_IN_FACTOR
    assert (pending.request.cursor_x, pending.request.cursor_y) == (4.0, 2.0)


def test_wheel_direction_selects_factor():
    assert wheel_zoom_factor(-1.0) == ZOOM_IN_FACTOR == 2.0
    assert wheel_zoom_factor(53.0) == ZOOM_OUT_FACTOR == 0.5
    assert wheel_zoom_factor(0.0) is None


def test_zero_wheel_delta_is_ignored(session, scheduler):
    assert session.on_wheel(1.0, 1.0, 0.0) is None
    assert session.state == "idle"
    assert scheduler.timers == []


def test_settled_zooms_compose(session, scheduler):
    initial = session.viewport
    session.on_wheel(5.0, 2.0, -1.0)
    scheduler.advance(DEBOUNCE_SECONDS)
    session.on_wheel(5.0, 2.0, 1.0)
    scheduler.advance(DEBOUNCE_SECONDS)

    restored = session.viewport
    assert restored.x_start == pytest.approx(initial.x_start)
    assert restored.x_end == pytest.approx(initial.x_end)
    assert restored.y_start == pytest.approx(initial.y_start)
    assert restored.y_end == pytest.approx(initial.y_end)
    assert session.render_count == 2


def test_close_cancels_pending(session, scheduler, renderer):
    session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    session.close()
    assert session.state == "idle"
    scheduler.advance(1.0)
    assert renderer.viewports == []


def test_invalid_zoom_leaves_pending_untouched(session, scheduler):
    pending = session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    with pytest.raises(ValueError):
        session.zoom(1.0, 1.0, 0.0)
    assert session.pending == pending
    assert len(scheduler.outstanding) == 1


def test_profile_controls_render(presenter, scheduler, clock, renderer):
    session = RenderSession(WIDTH, HEIGHT, presenter, scheduler, profile=CLASSIC, renderer=renderer, clock=clock)
    target = session.start()
    assert target.max_iter == CLASSIC.max_iter
    assert session.viewport == fit_canvas(CLASSIC.bounds, WIDTH, HEIGHT)
    assert session.gradient.name == CLASSIC.colormap


def test_rejects_degenerate_canvas(presenter, scheduler):
    with pytest.raises(ValueError):
        RenderSession(1, 10, presenter, scheduler)


def test_thread_timer_scheduler_debounces(gradient):
    presented = threading.Event()

    class SignallingPresenter(RecordingPresenter):
        def present(self, target):
            super().present(target)
            presented.set()

    presenter = SignallingPresenter()
    renderer = CountingRenderer()
    session = RenderSession(WIDTH, HEIGHT, presenter, ThreadTimerScheduler(), gradient=gradient, renderer=renderer)
    initial = session.viewport

    session.zoom(1.0, 1.0, ZOOM_IN_FACTOR)
    session.zoom(7.0, 5.0, ZOOM_IN_FACTOR)

    assert presented.wait(timeout=10.0)
    time.sleep(DEBOUNCE_SECONDS * 2)
    assert renderer.viewports == [scale_about_point(initial, WIDTH, HEIGHT, 7.0, 5.0, ZOOM_IN_FACTOR)]
    assert session.state == "idle"
