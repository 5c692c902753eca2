import math
import os
import sys
import time
import warnings
from argparse import ArgumentParser, ArgumentTypeError
from pathlib import Path

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

import numpy as np

# Imports for output
import PIL.Image
import imageio

from mandelzoom import (
    Gradient,
    PROFILES,
    get_profile,
    render,
    scale_about_center,
    zoom_path,
)
from mandelzoom.colors import parse_hex_color
from mandelzoom.config import DEFAULT_CHUNK_ROWS, DEFAULT_PROFILE
from mandelzoom.sequence import EASINGS

def finite_float(value):
    try:
        number = float(value)
    except ValueError:
        raise ArgumentTypeError(f"'{value}' is not a valid float64.") from None
    if not math.isfinite(number):
        raise ArgumentTypeError(f"'{value}' is not a finite number.")
    return number

def positive_float(value):
    number = finite_float(value)
    if number <= 0:
        raise ArgumentTypeError(f"'{value}' must be greater than zero.")
    return number

def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set centered on a point of the complex plane.')

    parser.add_argument('x_center', type=finite_float,
                        help='real coordinate of the image center', metavar='X_CENTER')

    parser.add_argument('y_center', type=finite_float,
                        help='imaginary coordinate of the image center', metavar='Y_CENTER')

    parser.add_argument('zoom', type=positive_float,
                        help='magnification relative to the profile bounds; > 1 zooms in, < 1 zooms out',
                        metavar='ZOOM')

    parser.add_argument('--profile', choices=sorted(PROFILES), default=DEFAULT_PROFILE.name,
                        help='rendering profile: "smooth" (continuous coloring, 255 iterations) '
                             'or "classic" (integer counts, 200 iterations)')

    parser.add_argument('--width', type=int, dest='width', metavar='WIDTH',
                        help='image width in pixels (default: from the profile)')

    parser.add_argument('--height', type=int, dest='height', metavar='HEIGHT',
                        help='image height in pixels (default: from the profile)')

    parser.add_argument('--colormap', type=str, dest='colormap', metavar='COLORMAP',
                        help='matplotlib colormap used as the gradient (default: from the profile)')

    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')

    parser.add_argument('--inside-color', type=str, default='#000000',
                        help='Hex color for points inside the Mandelbrot set.')

    parser.add_argument('--alpha', action='store_true',
                        help='write RGBA pixels (alpha 255) instead of RGB')

    parser.add_argument('--output', dest='output', type=str,
                        help='destination file; the extension selects the format '
                             '(default: output.png, or movie.gif with --frames > 1)')

    parser.add_argument('--frames', type=int, default=1, metavar='FRAMES',
                        help='number of frames; more than one writes an animated GIF zooming from 1 to ZOOM')

    parser.add_argument('--easing', choices=EASINGS, default='ease',
                        help='Temporal curve used for the zoom sequence.')

    parser.add_argument('--workers', type=int, default=None, metavar='WORKERS',
                        help='worker threads used to fill the image (default: executor default)')

    parser.add_argument('--chunk-rows', type=int, dest='chunk_rows', default=DEFAULT_CHUNK_ROWS, metavar='ROWS',
                        help='rows rendered per parallel task')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser

def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper

def resolve_output_path(opt, parser: ArgumentParser) -> Path:
    animated = opt.frames > 1
    default_name = "movie.gif" if animated else "output.png"
    output_path = Path(opt.output or default_name).expanduser()

    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    if not output_path.suffix:
        output_path = output_path.with_suffix(".gif" if animated else ".png")
    if animated and output_path.suffix.lower() != ".gif":
        parser.error("Animated outputs (--frames > 1) must end with .gif.")
    if opt.alpha and _pil_format_name(output_path.suffix.lstrip(".")) == "JPEG":
        parser.error("--alpha cannot be written to JPEG files.")
    return output_path.resolve()

def write_single_image(image: PIL.Image.Image, output_path: Path) -> None:
    """Write a single image to ``output_path``; the suffix picks the format."""

    pil_format = _pil_format_name(output_path.suffix.lstrip("."))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)

def write_gif(output_path: Path, frames) -> int:
    """Stream ``frames`` into an animated GIF, returning how many were written."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    writer = imageio.get_writer(str(output_path), mode='I', duration=0.1, loop=0)
    count = 0
    try:
        for frame_array in frames:
            writer.append_data(frame_array)
            count += 1
    finally:
        writer.close()
    return count

def format_viewport(viewport) -> str:
    return f"{viewport.x_start}, {viewport.x_end}, {viewport.y_start}, {viewport.y_end}"

def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)
    set_verbose(opt.verbose)

    profile = get_profile(opt.profile)
    width = opt.width if opt.width is not None else profile.width
    height = opt.height if opt.height is not None else profile.height
    if width < 2 or height < 2:
        parser.error(f"Image size must be at least 2x2 pixels, got {width}x{height}.")
    if opt.frames < 1:
        parser.error(f"--frames must be at least 1, got {opt.frames}.")
    if opt.workers is not None and opt.workers < 1:
        parser.error(f"--workers must be at least 1, got {opt.workers}.")
    if opt.chunk_rows < 1:
        parser.error(f"--chunk-rows must be at least 1, got {opt.chunk_rows}.")

    output_path = resolve_output_path(opt, parser)

    try:
        inside_rgb = parse_hex_color(opt.inside_color)
    except ValueError as exc:
        parser.error(str(exc))

    colormap = opt.colormap or profile.colormap
    try:
        gradient = Gradient.from_colormap(colormap, inverted=opt.invert)
    except (KeyError, ValueError):
        parser.error(f"Unknown colormap '{colormap}'.")

    device = select_device()
    channels = 4 if opt.alpha else 3
    log(f"Profile {profile.name}: {width}x{height}, max_iter={profile.max_iter}, colormap={gradient.name}")

    def render_viewport(viewport):
        return render(
            viewport,
            width,
            height,
            profile.max_iter,
            gradient,
            smooth=profile.smooth,
            channels=channels,
            interior=inside_rgb,
            workers=opt.workers,
            chunk_rows=opt.chunk_rows,
            device=device,
        )

    if opt.frames == 1:
        viewport = scale_about_center(profile.bounds, width, height, opt.x_center, opt.y_center, opt.zoom)
        print(format_viewport(viewport))

        start_mandelbrot = time.perf_counter()
        target = render_viewport(viewport)
        print(f"Mandelbrot: {time.perf_counter() - start_mandelbrot}")

        start_saving = time.perf_counter()
        write_single_image(PIL.Image.fromarray(target.pixels), output_path)
        print(f"Saving: {time.perf_counter() - start_saving}")
        log(f"Wrote {output_path}")
        return 0

    viewports = zoom_path(
        profile.bounds, width, height, opt.x_center, opt.y_center, opt.zoom, opt.frames, easing=opt.easing,
    )
    print(format_viewport(viewports[-1]))

    rendered = []
    start_mandelbrot = time.perf_counter()
    for i, viewport in enumerate(viewports):
        print("frame {0} out of {1}".format(i, opt.frames), end='\r')
        log(format_viewport(viewport))
        rendered.append(np.ascontiguousarray(render_viewport(viewport).pixels))
    print(f"Mandelbrot: {time.perf_counter() - start_mandelbrot}")

    start_saving = time.perf_counter()
    write_gif(output_path, rendered)
    print(f"Saving: {time.perf_counter() - start_saving}")
    log(f"Wrote {len(rendered)} frames to {output_path}")
    return 0

if __name__ == '__main__':
    sys.exit(main())
