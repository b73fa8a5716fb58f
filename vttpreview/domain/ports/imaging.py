from __future__ import annotations
from pathlib import Path
from typing import Protocol, Tuple


class ImageMeasurerPort(Protocol):
    def measure(self, path: Path) -> Tuple[int, int]: ...  # (width, height); MetadataError on failure
