# vttpreview/domain/entities/preview.py
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from vttpreview.common.settings import Settings, get_settings
from vttpreview.domain.enums.pipeline_state import PipelineState
from vttpreview.domain.errors import ConfigurationError
from vttpreview.domain.policies import layout as grid
from vttpreview.domain.policies.output_paths import default_output_dir, staged_name, thumbnail_dir

THUMB_GLOB = "thumb*.jpg"
_THUMB_INDEX = re.compile(r"^thumb(\d+)\.jpg$", re.IGNORECASE)


@dataclass(frozen=True)
class PreviewJob:
    """
    One video -> one sprite/VTT pair.
    The job owns `thumbnail_dir` exclusively while it runs.
    """
    video_path: Path
    thumb_rate_seconds: float
    thumb_width: int
    output_dir: Path
    thumbnail_dir: Path
    sprite_file_name: str = "sprite.jpg"
    vtt_file_name: str = "thumbs.vtt"

    @classmethod
    def create(
        cls,
        video_path: Path | str | None,
        output_dir: Path | str | None = None,
        thumb_rate_seconds: Optional[float] = None,
        thumb_width: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> "PreviewJob":
        cfg = settings or get_settings()
        if video_path is None or not str(video_path).strip():
            raise ConfigurationError("a video path is required")
        video = Path(video_path).expanduser()

        rate = cfg.thumb_rate_seconds if thumb_rate_seconds is None else thumb_rate_seconds
        width = cfg.thumb_width if thumb_width is None else thumb_width
        try:
            rate = float(rate)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"thumbnail interval must be a number, got {rate!r}") from e
        if not math.isfinite(rate) or rate <= 0:
            raise ConfigurationError(f"thumbnail interval must be a positive finite number, got {rate}")
        if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
            raise ConfigurationError(f"thumbnail width must be a positive integer, got {width!r}")

        out = Path(output_dir).expanduser() if output_dir else default_output_dir(video, cfg)
        return cls(
            video_path=video,
            thumb_rate_seconds=rate,
            thumb_width=width,
            output_dir=out,
            thumbnail_dir=thumbnail_dir(out, cfg),
            sprite_file_name=cfg.sprite_file_name,
            vtt_file_name=cfg.vtt_file_name,
        )

    @property
    def sprite_path(self) -> Path:
        return self.output_dir / self.sprite_file_name

    @property
    def vtt_path(self) -> Path:
        return self.output_dir / self.vtt_file_name

    @property
    def staged_sprite_path(self) -> Path:
        return self.output_dir / staged_name(self.sprite_file_name)

    @property
    def staged_vtt_path(self) -> Path:
        return self.output_dir / staged_name(self.vtt_file_name)

    @property
    def thumbnail_pattern(self) -> Path:
        """ffmpeg image2 output pattern."""
        return self.thumbnail_dir / "thumb%03d.jpg"


def _capture_index(path: Path) -> Tuple[int, str]:
    m = _THUMB_INDEX.match(path.name)
    return (int(m.group(1)) if m else -1, path.name)


@dataclass(frozen=True)
class ThumbnailSet:
    """Thumbnail files in capture order, which is also playback order."""
    paths: Tuple[Path, ...] = ()

    @classmethod
    def from_paths(cls, paths: Iterable[Path | str]) -> "ThumbnailSet":
        return cls(tuple(sorted((Path(p) for p in paths), key=_capture_index)))

    @classmethod
    def from_directory(cls, directory: Path | str) -> "ThumbnailSet":
        d = Path(directory)
        if not d.is_dir():
            return cls()
        return cls.from_paths(p for p in d.glob(THUMB_GLOB) if p.is_file())

    def require_non_empty(self) -> "ThumbnailSet":
        if not self.paths:
            raise ConfigurationError("no thumbnails to tile")
        return self

    @property
    def first(self) -> Path:
        return self.require_non_empty().paths[0]

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)


@dataclass(frozen=True)
class SpriteLayout:
    thumb_width: int
    thumb_height: int
    columns: int
    rows: int

    @classmethod
    def for_count(cls, count: int, thumb_width: int, thumb_height: int) -> "SpriteLayout":
        columns, rows = grid.compute_grid(count)
        return cls(thumb_width=thumb_width, thumb_height=thumb_height, columns=columns, rows=rows)

    @property
    def cell_count(self) -> int:
        return self.columns * self.rows

    @property
    def sprite_width(self) -> int:
        return grid.sprite_dimensions(self.columns, self.rows, self.thumb_width, self.thumb_height)[0]

    @property
    def sprite_height(self) -> int:
        return grid.sprite_dimensions(self.columns, self.rows, self.thumb_width, self.thumb_height)[1]

    def cell_origin(self, index: int) -> Tuple[int, int]:
        if not 0 <= index < self.cell_count:
            raise IndexError(f"cell {index} outside {self.columns}x{self.rows} grid")
        return grid.cell_origin(index, self.columns, self.thumb_width, self.thumb_height)


@dataclass(frozen=True)
class Cue:
    start: float
    end: float
    x: int
    y: int
    width: int
    height: int

    def fragment(self, sprite_file_name: str) -> str:
        return f"{sprite_file_name}#xywh={self.x},{self.y},{self.width},{self.height}"


@dataclass(frozen=True)
class PreviewArtifact:
    sprite_path: Path
    vtt_path: Path
    layout: SpriteLayout
    cue_count: int
    thumbnail_count: int

    @property
    def output_dir(self) -> Path:
        return self.sprite_path.parent

    def read_bytes(self) -> Tuple[bytes, bytes]:
        return self.sprite_path.read_bytes(), self.vtt_path.read_bytes()


@dataclass(frozen=True)
class PipelineContext:
    """Value threaded through the pipeline; each stage returns a replaced copy."""
    job: PreviewJob
    state: PipelineState = PipelineState.created
    thumbnails: ThumbnailSet = field(default_factory=ThumbnailSet)
    layout: Optional[SpriteLayout] = None
    artifact: Optional[PreviewArtifact] = None
    thumbnails_removed: bool = False

    @property
    def is_tiled(self) -> bool:
        return self.state.reached(PipelineState.tiled)
