# vttpreview/domain/policies/layout.py
from __future__ import annotations

from math import isqrt
from typing import Tuple

from vttpreview.domain.errors import ConfigurationError


def compute_grid(thumbnail_count: int) -> Tuple[int, int]:
    """
    Square grid that holds every thumbnail: columns = rows = ceil(sqrt(count)).

    Both the montage invocation and the VTT cue rectangles are derived from
    this one function; they must agree or cues point at the wrong tiles.
    """
    if isinstance(thumbnail_count, bool) or not isinstance(thumbnail_count, int):
        raise ConfigurationError(f"thumbnail count must be an integer, got {thumbnail_count!r}")
    if thumbnail_count <= 0:
        raise ConfigurationError(f"thumbnail count must be positive, got {thumbnail_count}")
    side = isqrt(thumbnail_count)
    if side * side < thumbnail_count:
        side += 1
    return side, side


def cell_origin(index: int, columns: int, thumb_width: int, thumb_height: int) -> Tuple[int, int]:
    """Top-left pixel of grid cell `index` (row-major)."""
    column = index % columns
    row = index // columns
    return column * thumb_width, row * thumb_height


def sprite_dimensions(columns: int, rows: int, thumb_width: int, thumb_height: int) -> Tuple[int, int]:
    return columns * thumb_width, rows * thumb_height
