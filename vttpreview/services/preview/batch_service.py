# vttpreview/services/preview/batch_service.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from vttpreview.common.logging import get_logger
from vttpreview.common.settings import Settings, get_settings
from vttpreview.domain.entities.preview import PreviewArtifact, PreviewJob
from vttpreview.domain.errors import ConfigurationError, PreviewError
from vttpreview.services.preview.pipeline import PreviewPipeline


@dataclass
class PreviewRunReport:
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    planned: int = 0
    generated: int = 0
    errors: int = 0
    # Each tuple is (video path, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)
    artifacts: List[PreviewArtifact] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.errors += 1
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PreviewBatchService:
    """
    Runs independent preview jobs concurrently, one pipeline per job.
    Jobs share nothing, so the only precondition is distinct output directories.
    """

    def __init__(
        self,
        pipeline_factory: Callable[[], PreviewPipeline],
        *,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.pipeline_factory = pipeline_factory
        self.cfg = settings or get_settings()
        self.log = logger or get_logger()

    @staticmethod
    def _check_distinct_outputs(jobs: Sequence[PreviewJob]) -> None:
        seen: Dict[Path, Path] = {}
        for job in jobs:
            key = job.output_dir.expanduser().resolve()
            if key in seen:
                raise ConfigurationError(
                    f"{job.video_path} and {seen[key]} would both write to {job.output_dir}; pass distinct output dirs"
                )
            seen[key] = job.video_path

    def _run_one(self, job: PreviewJob, cleanup: Optional[bool]) -> PreviewArtifact:
        return self.pipeline_factory().run(job, cleanup=cleanup)

    def run(
        self,
        jobs: Sequence[PreviewJob],
        *,
        workers: Optional[int] = None,
        cleanup: Optional[bool] = None,
    ) -> PreviewRunReport:
        rep = PreviewRunReport()
        rep.start()
        jobs = list(jobs)
        rep.planned = len(jobs)
        if not jobs:
            rep.stop()
            return rep

        self._check_distinct_outputs(jobs)

        # Thread cap: at least 1, no more than cfg
        max_workers_cfg = int(getattr(self.cfg, "max_preview_workers", 4) or 4)
        max_workers = max(1, min(int(workers or max_workers_cfg), max_workers_cfg))

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {pool.submit(self._run_one, job, cleanup): job for job in jobs}
            for fut in as_completed(futures):
                job = futures[fut]
                try:
                    artifact = fut.result()
                except PreviewError as e:
                    self.log.error("preview failed for %s: %s", job.video_path, e)
                    rep.add_error(str(job.video_path), str(e))
                    continue
                rep.generated += 1
                rep.artifacts.append(artifact)

        rep.stop()
        return rep
