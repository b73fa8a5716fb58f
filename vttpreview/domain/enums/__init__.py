from vttpreview.domain.enums.host_platform import HostPlatform
from vttpreview.domain.enums.pipeline_state import PipelineStage, PipelineState
__all__ = [
    "HostPlatform",
    "PipelineStage",
    "PipelineState",
]
