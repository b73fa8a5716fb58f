# vttpreview/services/vtt/serializer.py
from __future__ import annotations

import math
import re
from typing import List, Sequence, Tuple

from vttpreview.domain.entities.preview import Cue, SpriteLayout
from vttpreview.domain.errors import ConfigurationError
from vttpreview.domain.policies.timing import compute_cue_timings, total_cue_duration

HEADER = "WEBVTT"
ARROW = " --> "

_TIMESTAMP = re.compile(r"^(\d{2,}):([0-5]\d):([0-5]\d)\.(\d{3})$")
_FRAGMENT = re.compile(r"^(?P<name>.*)#xywh=(?P<x>\d+),(?P<y>\d+),(?P<w>\d+),(?P<h>\d+)$")


def format_timestamp(seconds: float) -> str:
    """
    HH:MM:SS.mmm, rounded to the nearest millisecond.
    Hours keep counting past 24; the separator is always '.'.
    """
    if not math.isfinite(seconds) or seconds < 0:
        raise ConfigurationError(f"timestamp must be a non-negative finite number, got {seconds}")
    total_ms = int(round(seconds * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def parse_timestamp(text: str) -> float:
    m = _TIMESTAMP.match(text.strip())
    if not m:
        raise ValueError(f"not a VTT timestamp: {text!r}")
    h, mi, s, ms = (int(g) for g in m.groups())
    return h * 3600 + mi * 60 + s + ms / 1000.0


def build_cues(layout: SpriteLayout, timings: Sequence[Tuple[float, float]]) -> List[Cue]:
    """One cue per grid cell, row-major, including cells with no thumbnail."""
    if len(timings) != layout.cell_count:
        raise ConfigurationError(
            f"{len(timings)} timings for a {layout.columns}x{layout.rows} grid ({layout.cell_count} cells)"
        )
    cues: List[Cue] = []
    for index, (start, end) in enumerate(timings):
        x, y = layout.cell_origin(index)
        cues.append(Cue(start=start, end=end, x=x, y=y, width=layout.thumb_width, height=layout.thumb_height))
    return cues


def render_cues(cues: Sequence[Cue], sprite_file_name: str) -> bytes:
    lines = [HEADER, ""]
    for cue in cues:
        lines.append(f"{format_timestamp(cue.start)}{ARROW}{format_timestamp(cue.end)}")
        lines.append(cue.fragment(sprite_file_name))
        lines.append("")
    return ("\n".join(lines) + "\n").encode("utf-8")


def render(layout: SpriteLayout, timings: Sequence[Tuple[float, float]], sprite_file_name: str) -> bytes:
    return render_cues(build_cues(layout, timings), sprite_file_name)


def render_for_job(layout: SpriteLayout, thumb_rate_seconds: float, sprite_file_name: str) -> bytes:
    """Cue span is interval x cell count, not the decoded video length."""
    total = total_cue_duration(thumb_rate_seconds, layout.cell_count)
    return render(layout, compute_cue_timings(total, layout.cell_count), sprite_file_name)


def parse_cues(text: str | bytes) -> List[Cue]:
    """Read back the cue blocks of a sprite VTT file (the format written by `render`)."""
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    lines = [ln.strip() for ln in text.splitlines()]
    if not lines or lines[0] != HEADER:
        raise ValueError("missing WEBVTT header")

    cues: List[Cue] = []
    i = 1
    while i < len(lines):
        line = lines[i]
        if ARROW.strip() not in line:
            i += 1
            continue
        start_s, end_s = (part.strip() for part in line.split(ARROW.strip(), 1))
        if i + 1 >= len(lines):
            raise ValueError(f"cue at line {i + 1} has no payload")
        m = _FRAGMENT.match(lines[i + 1])
        if not m:
            raise ValueError(f"cue payload at line {i + 2} is not an xywh fragment: {lines[i + 1]!r}")
        cues.append(Cue(
            start=parse_timestamp(start_s),
            end=parse_timestamp(end_s),
            x=int(m["x"]), y=int(m["y"]), width=int(m["w"]), height=int(m["h"]),
        ))
        i += 2
    return cues
