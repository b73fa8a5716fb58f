# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.fakes import FakeMediaRunner, FakeProvisioner
from vttpreview.common.settings import Settings
from vttpreview.services.imaging.pillow_measurer import PillowImageMeasurer
from vttpreview.services.preview.pipeline import PreviewPipeline


@pytest.fixture()
def settings() -> Settings:
    # ignore any .env in the working directory
    return Settings(_env_file=None)


@pytest.fixture()
def fake_runner() -> FakeMediaRunner:
    return FakeMediaRunner()


@pytest.fixture()
def fake_provisioner() -> FakeProvisioner:
    return FakeProvisioner()


@pytest.fixture()
def video_file(tmp_path) -> Path:
    p = tmp_path / "media" / "clip.mp4"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(b"not really a video")
    return p


@pytest.fixture()
def pipeline(fake_runner, fake_provisioner, settings) -> PreviewPipeline:
    return PreviewPipeline(fake_runner, PillowImageMeasurer(), fake_provisioner, settings=settings)
