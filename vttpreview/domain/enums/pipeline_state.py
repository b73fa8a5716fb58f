from __future__ import annotations
from enum import StrEnum


class PipelineState(StrEnum):
    created = "created"
    tools_verified = "tools_verified"
    thumbnails_extracted = "thumbnails_extracted"
    thumbnails_resized = "thumbnails_resized"
    tiled = "tiled"
    metadata_read = "metadata_read"
    vtt_written = "vtt_written"
    done = "done"

    @property
    def order(self) -> int:
        return list(PipelineState).index(self)

    def reached(self, other: "PipelineState") -> bool:
        """True when this state is `other` or any later state."""
        return self.order >= other.order


class PipelineStage(StrEnum):
    """Operations that move the pipeline from one state to the next."""
    verify_tools = "verify_tools"
    extract = "extract"
    resize = "resize"
    tile = "tile"
    read_metadata = "read_metadata"
    write_vtt = "write_vtt"
    promote = "promote"
    cleanup = "cleanup"
