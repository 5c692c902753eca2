from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

GALLERY_ROOT = Path("examples/gallery")
BASE_ARGS = ["--width", "640", "--height", "400"]


@dataclass
class Expected:
    path: Path


@dataclass
class Location:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, "zoom.py", *self.args]


def _location(name: str, x_center: str, y_center: str, zoom: str, *extra: str, filename: str = "render.png") -> Location:
    output = GALLERY_ROOT / name / filename
    return Location(
        name=name,
        args=[x_center, y_center, zoom, *BASE_ARGS, *extra, "--output", str(output)],
        expected=[Expected(output)],
        clean=[GALLERY_ROOT / name],
    )


LOCATIONS: list[Location] = [
    _location("whole-set", "-0.5", "0", "1"),
    _location("seahorse-valley", "-0.743643887", "0.131825904", "200"),
    _location("elephant-valley", "0.282", "0.01", "60"),
    _location("period-three", "-0.1226", "0.7449", "40"),
    _location("classic-profile", "-0.765", "0", "1", "--profile", "classic"),
    _location("inverted-magma", "-0.16", "1.0405", "50", "--colormap", "magma", "--invert"),
    _location(
        "seahorse-zoom",
        "-0.743643887",
        "0.131825904",
        "500",
        "--frames",
        "24",
        "--width",
        "320",
        "--height",
        "200",
        filename="zoom.gif",
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(location: Location) -> None:
    _ensure_clean(location.clean or [])
    for expected in location.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(location: Location) -> None:
    for expected in location.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    GALLERY_ROOT.mkdir(parents=True, exist_ok=True)
    for location in LOCATIONS:
        print(f"\n[gallery] {location.name}")
        _prepare(location)
        subprocess.run(location.full_args(), check=True)
        _verify(location)
    print("\nGallery rendered successfully.")


if __name__ == "__main__":
    main()
