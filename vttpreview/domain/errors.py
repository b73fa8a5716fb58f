# vttpreview/domain/errors.py
from __future__ import annotations

from typing import Optional, Sequence

from vttpreview.domain.enums.pipeline_state import PipelineStage


class PreviewError(RuntimeError):
    """
    Base for every failure surfaced by the preview pipeline.
    `stage` is filled in by the orchestrator with the stage that was running.
    """

    def __init__(self, message: str, *, stage: Optional[PipelineStage] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"[{self.stage}] {self.message}"


class ConfigurationError(PreviewError, ValueError):
    """Invalid or missing input (no video, non-positive interval/width, zero tiles)."""


class ToolMissingError(PreviewError):
    def __init__(self, message: str, *, tool: Optional[str] = None, stage: Optional[PipelineStage] = None):
        super().__init__(message, stage=stage)
        self.tool = tool


class SubprocessFailureError(PreviewError):
    """An external tool exited abnormally or wrote to stderr."""

    def __init__(
        self,
        message: str,
        *,
        cmd: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        stage: Optional[PipelineStage] = None,
    ):
        super().__init__(message, stage=stage)
        self.cmd = list(cmd) if cmd is not None else None
        self.returncode = returncode
        self.stderr = stderr or ""

    def __str__(self) -> str:
        base = super().__str__()
        if self.returncode is not None:
            base = f"{base} (rc={self.returncode})"
        if self.stderr.strip():
            base = f"{base}\n{self.stderr.strip()}"
        return base


class MetadataError(PreviewError):
    def __init__(self, message: str, *, path=None, stage: Optional[PipelineStage] = None):
        super().__init__(message, stage=stage)
        self.path = path


class PreviewIOError(PreviewError, OSError):
    """Filesystem work (mkdir, read/write, rename, cleanup) failed; the original OSError is chained."""
