"""Interactive zoom state: debounced, single-flight re-rendering."""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Optional, Protocol

from .colors import Gradient
from .config import DEBOUNCE_SECONDS, DEFAULT_PROFILE, ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR, RenderProfile
from .renderer import RenderTarget, render
from .viewport import Viewport, fit_canvas, scale_about_point


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class Presenter(Protocol):
    def show_zoom_hint(self, zoom_factor: float, origin_x: float, origin_y: float) -> None: ...

    def clear_zoom_hint(self) -> None: ...

    def present(self, target: RenderTarget) -> None: ...


class ThreadTimerScheduler:
    """Runs callbacks on :class:`threading.Timer` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()


@dataclass(frozen=True)
class ZoomRequest:
    cursor_x: float
    cursor_y: float
    zoom_factor: float


@dataclass(frozen=True)
class PendingRender:
    """The one deferred render a session may have outstanding."""

    token: int
    scheduled_at: float
    target: Viewport
    request: ZoomRequest


def wheel_zoom_factor(delta_y: float) -> Optional[float]:
    """Scrolling up (negative delta) zooms in, down zooms out, zero is ignored."""

    if delta_y < 0:
        return ZOOM_IN_FACTOR
    if delta_y > 0:
        return ZOOM_OUT_FACTOR
    return None


class RenderSession:
    """Owns the committed viewport and at most one pending render.

    Every zoom request cancels the previous timer before scheduling a new
    one, so only the last request in a burst is ever rendered. The committed
    viewport changes only inside the timer callback.
    """

    def __init__(
        self,
        width: int,
        height: int,
        presenter: Presenter,
        scheduler: Scheduler,
        *,
        profile: RenderProfile = DEFAULT_PROFILE,
        gradient: Optional[Gradient] = None,
        renderer: Callable[..., RenderTarget] = render,
        clock: Callable[[], float] = time.monotonic,
        workers: Optional[int] = None,
        device: Optional[str] = None,
    ) -> None:
        if width < 2 or height < 2:
            raise ValueError(f"Canvas must be at least 2x2 pixels, got {width}x{height}.")
        self.width = int(width)
        self.height = int(height)
        self.profile = profile
        self.gradient = gradient if gradient is not None else Gradient.from_colormap(profile.colormap)
        self._presenter = presenter
        self._scheduler = scheduler
        self._renderer = renderer
        self._clock = clock
        self._workers = workers
        self._device = device

        self._lock = threading.RLock()
        self._tokens = itertools.count(1)
        self._viewport = fit_canvas(profile.bounds, self.width, self.height)
        self._pending: Optional[PendingRender] = None
        self._handle: Any = None
        self.render_count = 0

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def pending(self) -> Optional[PendingRender]:
        return self._pending

    @property
    def state(self) -> str:
        return "idle" if self._pending is None else "pending"

    def start(self) -> RenderTarget:
        """Draw the initial frame."""

        with self._lock:
            return self._render_and_present()

    def on_wheel(self, cursor_x: float, cursor_y: float, delta_y: float) -> Optional[PendingRender]:
        zoom_factor = wheel_zoom_factor(delta_y)
        if zoom_factor is None:
            return None
        return self.zoom(cursor_x, cursor_y, zoom_factor)

    def zoom(self, cursor_x: float, cursor_y: float, zoom_factor: float) -> PendingRender:
        """Schedule a render of the viewport zoomed about the cursor, replacing any pending one."""

        with self._lock:
            target = scale_about_point(self._viewport, self.width, self.height, cursor_x, cursor_y, zoom_factor)
            self._cancel_pending()

            self._presenter.show_zoom_hint(zoom_factor, cursor_x / self.width, cursor_y / self.height)

            token = next(self._tokens)
            self._pending = PendingRender(
                token=token,
                scheduled_at=self._clock(),
                target=target,
                request=ZoomRequest(cursor_x, cursor_y, zoom_factor),
            )
            self._handle = self._scheduler.call_later(DEBOUNCE_SECONDS, partial(self._settle, token))
            return self._pending

    def close(self) -> None:
        with self._lock:
            self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
        self._pending = None

    def _settle(self, token: int) -> None:
        with self._lock:
            pending = self._pending
            # A callback that lost the race with cancel() must not commit.
            if pending is None or pending.token != token:
                return
            self._pending = None
            self._handle = None
            self._viewport = pending.target
            self._presenter.clear_zoom_hint()
            self._render_and_present()

    def _render_and_present(self) -> RenderTarget:
        target = self._renderer(
            self._viewport,
            self.width,
            self.height,
            self.profile.max_iter,
            self.gradient,
            smooth=self.profile.smooth,
            channels=4,
            workers=self._workers,
            device=self._device,
        )
        self.render_count += 1
        self._presenter.present(target)
        return target
