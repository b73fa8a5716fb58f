# vttpreview/services/preview/commands.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from vttpreview.common.settings import Settings, get_settings
from vttpreview.domain.policies.layout import compute_grid
from vttpreview.domain.ports.provisioning import FFMPEG, IMAGEMAGICK, ToolSpec


def _fmt_rate(seconds: float) -> str:
    return f"{float(seconds):.10g}"


def required_tools(settings: Optional[Settings] = None) -> Tuple[ToolSpec, ...]:
    """Tools the pipeline invokes, with binaries as configured."""
    cfg = settings or get_settings()
    return (
        ToolSpec(name=FFMPEG.name, package=FFMPEG.package, binaries=(cfg.ffmpeg_bin,)),
        ToolSpec(name=IMAGEMAGICK.name, package=IMAGEMAGICK.package, binaries=(cfg.mogrify_bin, cfg.montage_bin)),
    )


def build_extract_cmd(video: Path, pattern: Path, thumb_rate_seconds: float, ffmpeg_bin: str = "ffmpeg") -> List[str]:
    """One frame every `thumb_rate_seconds`, written as numbered JPEGs."""
    return [
        ffmpeg_bin,
        "-hide_banner", "-loglevel", "error",
        "-y",
        "-i", str(video),
        "-f", "image2",
        "-vf", f"fps=1/{_fmt_rate(thumb_rate_seconds)}",
        str(pattern),
    ]


def build_resize_cmd(thumbs: Sequence[Path], width: int, mogrify_bin: str = "mogrify") -> List[str]:
    """In-place resize to `width`, height follows the aspect ratio."""
    return [mogrify_bin, "-resize", f"{int(width)}x", *(str(p) for p in thumbs)]


def build_tile_cmd(thumbs: Sequence[Path], out_path: Path, montage_bin: str = "montage") -> List[str]:
    """
    Concatenate thumbnails row-major into a fixed columns x rows grid.
    The grid comes from compute_grid, the same function the VTT cues use.
    """
    columns, rows = compute_grid(len(thumbs))
    return [
        montage_bin,
        "-mode", "concatenate",
        "-background", "black",
        "-tile", f"{columns}x{rows}",
        *(str(p) for p in thumbs),
        str(out_path),
    ]
