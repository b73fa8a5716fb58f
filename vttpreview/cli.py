"""Command-line entry point: video -> sprite.jpg + thumbs.vtt."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from vttpreview.common.settings import get_settings
from vttpreview.domain.entities.preview import PreviewJob
from vttpreview.domain.errors import PreviewError
from vttpreview.services.preview.pipeline import build_default_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vttpreview",
        description="Generate a thumbnail sprite and WebVTT cue file for video scrubbing previews.",
    )
    parser.add_argument("video", nargs="?", type=Path, default=None, help="Path to the source video")
    parser.add_argument(
        "output",
        nargs="?",
        type=Path,
        default=None,
        help="Output directory (default: <video_dir>/previews/<video_name>/)",
    )
    parser.add_argument(
        "thumb_rate_seconds",
        nargs="?",
        type=float,
        default=None,
        help="Seconds between thumbnails (default: 1)",
    )
    parser.add_argument(
        "thumb_width",
        nargs="?",
        type=int,
        default=None,
        help="Thumbnail width in pixels (default: 120)",
    )
    parser.add_argument(
        "--keep-thumbnails",
        action="store_true",
        help="Keep the intermediate thumbs/ directory",
    )
    parser.add_argument(
        "--install-tools",
        action="store_true",
        help="Install ffmpeg/ImageMagick with the host package manager if missing",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: settings LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.video is None:
        print("A video path is required.", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 0

    cfg = get_settings()
    updates = {}
    if args.install_tools:
        updates["auto_install_tools"] = True
    if args.keep_thumbnails:
        updates["cleanup_thumbnails"] = False
    if args.log_level:
        updates["log_level"] = args.log_level
    if updates:
        cfg = cfg.model_copy(update=updates)

    video = args.video.expanduser()
    if not video.is_file():
        print(f"Video file {video} does not exist.", file=sys.stderr)
        return 0

    try:
        job = PreviewJob.create(
            video,
            output_dir=args.output,
            thumb_rate_seconds=args.thumb_rate_seconds,
            thumb_width=args.thumb_width,
            settings=cfg,
        )
        artifact = build_default_pipeline(cfg).run(job)
    except PreviewError as e:
        stage = e.stage or "setup"
        print(f"Preview generation failed at {stage}: {e.message}", file=sys.stderr)
        stderr = getattr(e, "stderr", "")
        if stderr and stderr.strip():
            print(stderr.strip(), file=sys.stderr)
        return 1

    print(
        f"Video preview files {artifact.sprite_path.name} and {artifact.vtt_path.name} "
        f"have been created here {artifact.output_dir}."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
