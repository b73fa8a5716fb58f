# vttpreview/domain/policies/timing.py
from __future__ import annotations

import math
from typing import List, Tuple

from vttpreview.domain.errors import ConfigurationError


def total_cue_duration(thumb_rate_seconds: float, tile_count: int) -> float:
    """
    Span covered by the cue file: sampling interval x number of grid cells.

    This is not the decoded length of the video. Empty trailing cells still
    get a full interval each, so a 10s clip on a 4x4 grid yields 16s of cues.
    """
    if not math.isfinite(thumb_rate_seconds) or thumb_rate_seconds <= 0:
        raise ConfigurationError(f"thumbnail interval must be positive, got {thumb_rate_seconds}")
    if tile_count <= 0:
        raise ConfigurationError(f"tile count must be positive, got {tile_count}")
    return float(thumb_rate_seconds) * tile_count


def compute_cue_timings(total_duration: float, tile_count: int) -> List[Tuple[float, float]]:
    """
    Split `total_duration` evenly into `tile_count` contiguous (start, end) intervals.
    The last end is pinned to `total_duration`.
    """
    if isinstance(tile_count, bool) or not isinstance(tile_count, int) or tile_count <= 0:
        raise ConfigurationError(f"tile count must be a positive integer, got {tile_count!r}")
    if not math.isfinite(total_duration) or total_duration <= 0:
        raise ConfigurationError(f"total duration must be positive, got {total_duration}")

    total = float(total_duration)
    per_tile = total / tile_count
    timings: List[Tuple[float, float]] = []
    for i in range(tile_count):
        start = i * per_tile
        end = total if i == tile_count - 1 else (i + 1) * per_tile
        timings.append((start, end))
    return timings
