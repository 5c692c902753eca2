"""Rendering profiles and fixed constants shared by the batch and interactive front ends."""

from __future__ import annotations

from dataclasses import dataclass

from .viewport import Viewport

# Seconds of wheel silence before a pending zoom is committed and rendered.
DEBOUNCE_SECONDS = 0.2

ZOOM_IN_FACTOR = 2.0
ZOOM_OUT_FACTOR = 1.0 / ZOOM_IN_FACTOR

DEFAULT_CHUNK_ROWS = 16


@dataclass(frozen=True)
class RenderProfile:
    """Constants that describe one rendering variant."""

    name: str
    max_iter: int
    smooth: bool
    bounds: Viewport
    width: int
    height: int
    colormap: str = "turbo"

    def __post_init__(self) -> None:
        if self.max_iter < 1:
            raise ValueError("max_iter must be at least 1.")
        if self.width < 2 or self.height < 2:
            raise ValueError("Profile dimensions must be at least 2x2 pixels.")


SMOOTH = RenderProfile(
    name="smooth",
    max_iter=255,
    smooth=True,
    bounds=Viewport(-2.0, 2.0, -2.0, 2.0),
    width=2560,
    height=1600,
)

CLASSIC = RenderProfile(
    name="classic",
    max_iter=200,
    smooth=False,
    bounds=Viewport(-2.0, 0.47, -1.12, 1.12),
    width=2560,
    height=1600,
)

PROFILES = {profile.name: profile for profile in (SMOOTH, CLASSIC)}

DEFAULT_PROFILE = SMOOTH


def get_profile(name: str) -> RenderProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown profile '{name}'. Valid choices: {', '.join(sorted(PROFILES))}.") from None
