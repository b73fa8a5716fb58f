# vttpreview/services/preview/pipeline.py
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional, Tuple

from vttpreview.common.logging import get_logger
from vttpreview.common.settings import Settings, get_settings
from vttpreview.domain.entities.preview import (
    PipelineContext,
    PreviewArtifact,
    PreviewJob,
    SpriteLayout,
    ThumbnailSet,
)
from vttpreview.domain.enums.pipeline_state import PipelineStage, PipelineState
from vttpreview.domain.errors import (
    ConfigurationError,
    PreviewError,
    PreviewIOError,
    SubprocessFailureError,
)
from vttpreview.domain.ports.imaging import ImageMeasurerPort
from vttpreview.domain.ports.process import ProcessRunnerPort
from vttpreview.domain.ports.provisioning import ToolProvisionerPort
from vttpreview.services.imaging.pillow_measurer import PillowImageMeasurer
from vttpreview.services.preview.commands import (
    build_extract_cmd,
    build_resize_cmd,
    build_tile_cmd,
    required_tools,
)
from vttpreview.services.process.subprocess_runner import SubprocessRunner
from vttpreview.services.provision.installer import ToolInstaller
from vttpreview.services.vtt.serializer import render_for_job

Stage = Callable[[PipelineContext], PipelineContext]


class PreviewPipeline:
    """
    Runs one PreviewJob through:
        verify tools -> extract -> resize -> tile -> read metadata -> write vtt -> promote
    Stages are strictly sequential; each returns a new PipelineContext.

    Sprite and VTT are written under staging names and only renamed to their
    final names once both exist, so a failed run never leaves a sprite.jpg /
    thumbs.vtt pair behind. The thumbnail directory is only removed after
    tiling succeeded.
    """

    def __init__(
        self,
        runner: ProcessRunnerPort,
        measurer: ImageMeasurerPort,
        provisioner: ToolProvisionerPort,
        *,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runner = runner
        self.measurer = measurer
        self.provisioner = provisioner
        self.cfg = settings or get_settings()
        self.log = logger or get_logger()

    # --- main ---------------------------------------------------------------

    def run(self, job: PreviewJob, *, cleanup: Optional[bool] = None) -> PreviewArtifact:
        ctx = self.execute(job, cleanup=cleanup)
        if ctx.artifact is None:
            raise PreviewError(f"no artifact recorded for {job.video_path}", stage=PipelineStage.promote)
        return ctx.artifact

    def execute(self, job: PreviewJob, *, cleanup: Optional[bool] = None) -> PipelineContext:
        do_cleanup = self.cfg.cleanup_thumbnails if cleanup is None else bool(cleanup)
        ctx = PipelineContext(job=job)
        self.log.info("preview job start: %s -> %s", job.video_path, job.output_dir)

        steps: Tuple[Tuple[PipelineStage, Stage], ...] = (
            (PipelineStage.verify_tools, self.verify_tools),
            (PipelineStage.extract, self.extract),
            (PipelineStage.resize, self.resize),
            (PipelineStage.tile, self.tile),
            (PipelineStage.read_metadata, self.read_metadata),
            (PipelineStage.write_vtt, self.write_vtt),
            (PipelineStage.promote, self.promote),
        )
        try:
            for stage, fn in steps:
                ctx = self._advance(stage, fn, ctx)
        except BaseException:
            self._discard_staged(job)
            raise

        if do_cleanup:
            ctx = self._advance(PipelineStage.cleanup, self.cleanup, ctx)
        self.log.info("preview job done: %s (%d cues)", job.output_dir, ctx.artifact.cue_count if ctx.artifact else 0)
        return ctx

    def _advance(self, stage: PipelineStage, fn: Stage, ctx: PipelineContext) -> PipelineContext:
        self.log.debug("stage %s (state=%s)", stage, ctx.state)
        try:
            nxt = fn(ctx)
        except PreviewError as e:
            if e.stage is None:
                e.stage = stage
            self.log.error("stage %s failed: %s", stage, e)
            raise
        except OSError as e:
            self.log.error("stage %s failed with filesystem error: %s", stage, e)
            raise PreviewIOError(f"filesystem error: {e}", stage=stage) from e
        self.log.info("stage %s ok -> %s", stage, nxt.state)
        return nxt

    # --- stages -------------------------------------------------------------

    def verify_tools(self, ctx: PipelineContext) -> PipelineContext:
        for tool in required_tools(self.cfg):
            self.provisioner.ensure_installed(tool)
        return replace(ctx, state=PipelineState.tools_verified)

    def extract(self, ctx: PipelineContext) -> PipelineContext:
        job = ctx.job
        if not job.video_path.is_file():
            raise ConfigurationError(f"video file {job.video_path} does not exist")

        job.output_dir.mkdir(parents=True, exist_ok=True)
        job.thumbnail_dir.mkdir(parents=True, exist_ok=True)
        # leftovers from an earlier run would end up in the sprite
        for stale in ThumbnailSet.from_directory(job.thumbnail_dir):
            stale.unlink()

        cmd = build_extract_cmd(job.video_path, job.thumbnail_pattern, job.thumb_rate_seconds, self.cfg.ffmpeg_bin)
        self.runner.run(cmd)

        thumbs = ThumbnailSet.from_directory(job.thumbnail_dir)
        if not thumbs:
            raise SubprocessFailureError(f"ffmpeg produced no thumbnails for {job.video_path}", cmd=cmd)
        self.log.info("extracted %d thumbnails into %s", len(thumbs), job.thumbnail_dir)
        return replace(ctx, state=PipelineState.thumbnails_extracted, thumbnails=thumbs)

    def resize(self, ctx: PipelineContext) -> PipelineContext:
        thumbs = ctx.thumbnails.require_non_empty()
        self.runner.run(build_resize_cmd(thumbs.paths, ctx.job.thumb_width, self.cfg.mogrify_bin))
        return replace(ctx, state=PipelineState.thumbnails_resized)

    def tile(self, ctx: PipelineContext) -> PipelineContext:
        job = ctx.job
        thumbs = ctx.thumbnails.require_non_empty()
        staged = job.staged_sprite_path
        staged.unlink(missing_ok=True)

        cmd = build_tile_cmd(thumbs.paths, staged, self.cfg.montage_bin)
        self.runner.run(cmd)
        if not staged.is_file():
            raise SubprocessFailureError(f"montage did not write {staged}", cmd=cmd)
        return replace(ctx, state=PipelineState.tiled)

    def read_metadata(self, ctx: PipelineContext) -> PipelineContext:
        # every tile has the size of a resized thumbnail
        width, height = self.measurer.measure(ctx.thumbnails.first)
        layout = SpriteLayout.for_count(len(ctx.thumbnails), width, height)
        self.log.debug(
            "layout %dx%d cells of %dx%d -> sprite %dx%d",
            layout.columns, layout.rows, width, height, layout.sprite_width, layout.sprite_height,
        )
        return replace(ctx, state=PipelineState.metadata_read, layout=layout)

    def write_vtt(self, ctx: PipelineContext) -> PipelineContext:
        if ctx.layout is None:
            raise ConfigurationError("sprite layout unknown; metadata stage did not run")
        job = ctx.job
        data = render_for_job(ctx.layout, job.thumb_rate_seconds, job.sprite_file_name)
        job.staged_vtt_path.write_bytes(data)
        return replace(ctx, state=PipelineState.vtt_written)

    def promote(self, ctx: PipelineContext) -> PipelineContext:
        if ctx.layout is None:
            raise ConfigurationError("sprite layout unknown; metadata stage did not run")
        job = ctx.job
        promoted = False
        try:
            os.replace(job.staged_sprite_path, job.sprite_path)
            promoted = True
            os.replace(job.staged_vtt_path, job.vtt_path)
        except BaseException:
            # a new sprite must not sit next to an older thumbs.vtt
            if promoted:
                self._remove_quietly(job.sprite_path, job.vtt_path)
            raise
        artifact = PreviewArtifact(
            sprite_path=job.sprite_path,
            vtt_path=job.vtt_path,
            layout=ctx.layout,
            cue_count=ctx.layout.cell_count,
            thumbnail_count=len(ctx.thumbnails),
        )
        return replace(ctx, state=PipelineState.done, artifact=artifact)

    def cleanup(self, ctx: PipelineContext) -> PipelineContext:
        """Remove the thumbnail directory; refused until the sprite exists."""
        if not ctx.is_tiled:
            self.log.warning("not removing %s: tiling has not succeeded (state=%s)", ctx.job.thumbnail_dir, ctx.state)
            return ctx
        if ctx.job.thumbnail_dir.exists():
            try:
                shutil.rmtree(ctx.job.thumbnail_dir)
            except OSError as e:
                # outputs are already promoted
                self.log.warning("could not remove %s: %s", ctx.job.thumbnail_dir, e)
                return ctx
        return replace(ctx, thumbnails_removed=True)

    # --- helpers ------------------------------------------------------------

    def _discard_staged(self, job: PreviewJob) -> None:
        self._remove_quietly(job.staged_sprite_path, job.staged_vtt_path)

    def _remove_quietly(self, *paths: Path) -> None:
        for p in paths:
            try:
                p.unlink(missing_ok=True)
            except OSError as e:
                self.log.warning("could not remove partial output %s: %s", p, e)


def build_default_pipeline(settings: Optional[Settings] = None, logger: Optional[logging.Logger] = None) -> PreviewPipeline:
    """Pipeline wired to the real subprocess runner, Pillow and the host installer."""
    cfg = settings or get_settings()
    log = logger or get_logger(level=cfg.log_level)
    runner = SubprocessRunner(logger=log)
    return PreviewPipeline(
        runner,
        PillowImageMeasurer(),
        ToolInstaller(runner, settings=cfg, logger=log),
        settings=cfg,
        logger=log,
    )


def generate_preview_bytes(
    video_path: Path | str,
    *,
    thumb_rate_seconds: Optional[float] = None,
    thumb_width: Optional[int] = None,
    pipeline: Optional[PreviewPipeline] = None,
    settings: Optional[Settings] = None,
) -> Tuple[bytes, bytes]:
    """
    Build the preview in a throwaway directory and return (sprite_bytes, vtt_bytes).
    Nothing is left on disk afterwards.
    """
    cfg = settings or (pipeline.cfg if pipeline else get_settings())
    pipe = pipeline or build_default_pipeline(cfg)
    with tempfile.TemporaryDirectory(prefix="vttpreview-") as tmp:
        job = PreviewJob.create(
            video_path,
            output_dir=Path(tmp),
            thumb_rate_seconds=thumb_rate_seconds,
            thumb_width=thumb_width,
            settings=cfg,
        )
        artifact = pipe.run(job, cleanup=True)
        return artifact.read_bytes()
