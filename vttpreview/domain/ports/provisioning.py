from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Tuple


@dataclass(frozen=True)
class ToolSpec:
    name: str                  # human name, e.g. "ImageMagick"
    package: str               # package-manager name
    binaries: Tuple[str, ...]  # executables that must be on PATH


FFMPEG = ToolSpec(name="ffmpeg", package="ffmpeg", binaries=("ffmpeg",))
IMAGEMAGICK = ToolSpec(name="ImageMagick", package="imagemagick", binaries=("mogrify", "montage"))


class ToolProvisionerPort(Protocol):
    def ensure_installed(self, tool: ToolSpec) -> bool: ...
