import os
import sys
import warnings
from argparse import ArgumentParser

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

# Must run before anything imports TensorFlow.
if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

from mandelzoom.diagnostics import log, select_device, set_verbose

import matplotlib
import matplotlib.pyplot as plt

from mandelzoom import PROFILES, Gradient, RenderSession, get_profile
from mandelzoom.config import DEFAULT_PROFILE

_NON_INTERACTIVE_BACKENDS = {"agg", "cairo", "pdf", "pgf", "ps", "svg", "template"}

class CanvasTimerScheduler:
    """Debounce timers that fire on the figure's own event loop."""

    def __init__(self, canvas) -> None:
        self._canvas = canvas

    def call_later(self, delay, callback):
        timer = self._canvas.new_timer(interval=int(round(delay * 1000)))
        timer.single_shot = True
        timer.add_callback(callback)
        timer.start()
        return timer

    def cancel(self, handle) -> None:
        handle.stop()

class FigurePresenter:
    """Shows frames in a borderless axes that fills the whole figure.

    The axes' data coordinates are canvas pixels with the origin at the top
    left, so a zoom hint only has to move the image extent.
    """

    def __init__(self, figure, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._figure = figure
        self._axes = figure.add_axes([0.0, 0.0, 1.0, 1.0])
        self._axes.set_axis_off()
        self._axes.set_xlim(0, width)
        self._axes.set_ylim(height, 0)
        self._axes.set_autoscale_on(False)
        self._image = None

    def _full_extent(self):
        return (0, self.width, self.height, 0)

    def show_zoom_hint(self, zoom_factor, origin_x, origin_y) -> None:
        if self._image is None:
            return
        cx = origin_x * self.width
        cy = origin_y * self.height
        left = cx - cx * zoom_factor
        right = cx + (self.width - cx) * zoom_factor
        top = cy - cy * zoom_factor
        bottom = cy + (self.height - cy) * zoom_factor
        self._image.set_extent((left, right, bottom, top))
        self._figure.canvas.draw_idle()

    def clear_zoom_hint(self) -> None:
        if self._image is not None:
            self._image.set_extent(self._full_extent())

    def present(self, target) -> None:
        if self._image is None:
            self._image = self._axes.imshow(
                target.pixels,
                extent=self._full_extent(),
                interpolation='nearest',
                aspect='auto',
            )
        else:
            self._image.set_data(target.pixels)
            self._image.set_extent(self._full_extent())
        self._axes.set_xlim(0, self.width)
        self._axes.set_ylim(self.height, 0)
        self._figure.canvas.draw_idle()

class ScrollZoom:
    """``scroll_event`` handler that feeds wheel steps to a render session.

    Backends report event positions in physical pixels measured from the
    bottom left, while the session works in logical canvas pixels from the
    top left.
    """

    def __init__(self, session, height: int) -> None:
        self._session = session
        self._height = height

    def __call__(self, event):
        if event.x is None or event.y is None:
            return None
        ratio = getattr(event.canvas, "device_pixel_ratio", 1) or 1
        cursor_x = event.x / ratio
        cursor_y = self._height - event.y / ratio
        delta_y = -1.0 if event.button == 'up' else 1.0
        pending = self._session.on_wheel(cursor_x, cursor_y, delta_y)
        if pending is not None:
            log(f"Zoom x{pending.request.zoom_factor} at ({cursor_x:.0f}, {cursor_y:.0f})")
        return pending

def build_parser():
    parser = ArgumentParser(description='Explore the Mandelbrot set; scroll to zoom around the pointer.')
    parser.add_argument('--profile', choices=sorted(PROFILES), default=DEFAULT_PROFILE.name,
                        help='rendering profile')
    parser.add_argument('--colormap', type=str, metavar='COLORMAP',
                        help='matplotlib colormap used as the gradient (default: from the profile)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')
    return parser

def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    set_verbose(opt.verbose)

    backend = matplotlib.get_backend().lower()
    if backend in _NON_INTERACTIVE_BACKENDS or backend.startswith("module://"):
        sys.exit(f"error: matplotlib backend '{backend}' cannot display an interactive window; "
                 f"set MPLBACKEND to an interactive backend such as TkAgg or QtAgg.")

    profile = get_profile(opt.profile)
    try:
        gradient = Gradient.from_colormap(opt.colormap or profile.colormap)
    except (KeyError, ValueError):
        parser.error(f"Unknown colormap '{opt.colormap}'.")
    device = select_device()

    plt.rcParams['toolbar'] = 'None'
    figure = plt.figure()
    manager = getattr(figure.canvas, "manager", None)
    if manager is None:
        sys.exit("error: no window manager is available for the drawing surface.")
    manager.set_window_title("Mandelbrot")
    full_screen = getattr(manager, "full_screen_toggle", None)
    if full_screen is not None:
        full_screen()

    # Let the window settle to its real size before measuring it.
    plt.pause(0.05)
    width, height = figure.canvas.get_width_height()
    if width < 2 or height < 2:
        sys.exit(f"error: drawing surface is too small ({width}x{height}).")
    log(f"Canvas {width}x{height}, profile {profile.name}")

    presenter = FigurePresenter(figure, width, height)
    session = RenderSession(
        width,
        height,
        presenter,
        CanvasTimerScheduler(figure.canvas),
        profile=profile,
        gradient=gradient,
        device=device,
    )

    def on_close(event):
        session.close()

    figure.canvas.mpl_connect('scroll_event', ScrollZoom(session, height))
    figure.canvas.mpl_connect('close_event', on_close)

    session.start()
    plt.show()
    return 0

if __name__ == '__main__':
    sys.exit(main())
