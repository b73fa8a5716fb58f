# vttpreview/services/imaging/pillow_measurer.py
from __future__ import annotations

from pathlib import Path
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from vttpreview.domain.errors import MetadataError
from vttpreview.domain.ports.imaging import ImageMeasurerPort


class PillowImageMeasurer(ImageMeasurerPort):
    """Reads pixel dimensions of a thumbnail with Pillow."""

    def measure(self, path: Path) -> Tuple[int, int]:
        p = Path(path)
        if not p.is_file():
            raise MetadataError(f"thumbnail not found: {p}", path=p)
        try:
            with Image.open(p) as im:
                im.verify()
                width, height = im.size
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise MetadataError(f"cannot read image metadata from {p}: {e}", path=p) from e
        if width <= 0 or height <= 0:
            raise MetadataError(f"image {p} has empty dimensions {width}x{height}", path=p)
        return int(width), int(height)
