# vttpreview/domain/policies/output_paths.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from vttpreview.common.settings import Settings, get_settings


def default_output_dir(video_path: Path | str, settings: Optional[Settings] = None) -> Path:
    """
    <video_dir>/previews/<video_stem>/

    Two videos with the same stem in the same folder share this path; callers
    running such jobs concurrently must pass explicit output directories.
    """
    cfg = settings or get_settings()
    video = Path(video_path)
    return video.parent / cfg.previews_subdir / video.stem


def thumbnail_dir(output_dir: Path | str, settings: Optional[Settings] = None) -> Path:
    cfg = settings or get_settings()
    return Path(output_dir) / cfg.thumbs_subdir


def staged_name(file_name: str) -> str:
    """sprite.jpg -> sprite.partial.jpg (keeps the extension so tools infer the format)."""
    p = Path(file_name)
    return f"{p.stem}.partial{p.suffix}"
