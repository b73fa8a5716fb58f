"""Thumbnail sprite + WebVTT generator for video hover/scrub previews."""
from vttpreview.domain.entities.preview import Cue, PreviewArtifact, PreviewJob, SpriteLayout, ThumbnailSet
from vttpreview.domain.errors import (
    ConfigurationError,
    MetadataError,
    PreviewError,
    PreviewIOError,
    SubprocessFailureError,
    ToolMissingError,
)
from vttpreview.services.preview.pipeline import PreviewPipeline, build_default_pipeline, generate_preview_bytes

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "Cue",
    "MetadataError",
    "PreviewArtifact",
    "PreviewError",
    "PreviewIOError",
    "PreviewJob",
    "PreviewPipeline",
    "SpriteLayout",
    "SubprocessFailureError",
    "ThumbnailSet",
    "ToolMissingError",
    "build_default_pipeline",
    "generate_preview_bytes",
]
