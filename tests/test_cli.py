# tests/test_cli.py
from __future__ import annotations

import pytest

import vttpreview.cli as cli_mod
from tests.helpers.fakes import FakeMediaRunner, FakeProvisioner
from vttpreview.services.imaging.pillow_measurer import PillowImageMeasurer
from vttpreview.services.preview.pipeline import PreviewPipeline


class _Recorder:
    settings = []
    runners = []

    @classmethod
    def build(cls, cfg, logger=None):
        cls.settings.append(cfg)
        runner = FakeMediaRunner()
        cls.runners.append(runner)
        return PreviewPipeline(runner, PillowImageMeasurer(), FakeProvisioner(), settings=cfg)


@pytest.fixture(autouse=True)
def _wire(monkeypatch, settings):
    _Recorder.settings.clear()
    _Recorder.runners.clear()
    monkeypatch.setattr(cli_mod, "get_settings", lambda: settings, raising=True)
    monkeypatch.setattr(cli_mod, "build_default_pipeline", _Recorder.build, raising=True)


def test_cli_success_prints_output_dir(video_file, capsys):
    rc = cli_mod.main([str(video_file)])
    out = capsys.readouterr().out
    expected = video_file.parent / "previews" / "clip"
    assert rc == 0
    assert str(expected) in out
    assert (expected / "sprite.jpg").exists()
    assert (expected / "thumbs.vtt").exists()
    # thumbnails removed by default
    assert not (expected / "thumbs").exists()


def test_cli_positional_overrides(video_file, tmp_path):
    out_dir = tmp_path / "custom"
    rc = cli_mod.main([str(video_file), str(out_dir), "2", "160", "--keep-thumbnails"])
    assert rc == 0
    ffmpeg, mogrify, _ = _Recorder.runners[0].calls
    assert "fps=1/2" in ffmpeg
    assert "160x" in mogrify
    assert (out_dir / "thumbs").is_dir()
    assert _Recorder.settings[0].cleanup_thumbnails is False


def test_cli_install_flag_enables_auto_install(video_file):
    cli_mod.main([str(video_file), "--install-tools"])
    assert _Recorder.settings[0].auto_install_tools is True


def test_cli_missing_video_reports_and_skips(tmp_path, capsys):
    rc = cli_mod.main([str(tmp_path / "missing.mp4")])
    err = capsys.readouterr().err
    assert rc == 0
    assert "does not exist" in err
    assert _Recorder.runners == []


def test_cli_without_video_prints_usage(capsys):
    rc = cli_mod.main([])
    err = capsys.readouterr().err
    assert rc == 0
    assert "video path is required" in err
    assert "usage: vttpreview" in err
    assert _Recorder.runners == []


def test_cli_reports_failing_stage(video_file, monkeypatch, capsys, settings):
    def _failing(cfg, logger=None):
        runner = FakeMediaRunner()
        runner.fail["montage"] = "montage: no decode delegate"
        return PreviewPipeline(runner, PillowImageMeasurer(), FakeProvisioner(), settings=cfg)

    monkeypatch.setattr(cli_mod, "build_default_pipeline", _failing, raising=True)
    rc = cli_mod.main([str(video_file)])
    err = capsys.readouterr().err
    assert rc == 1
    assert "failed at tile" in err
    assert "no decode delegate" in err
    assert not (video_file.parent / "previews" / "clip" / "sprite.jpg").exists()


def test_cli_rejects_bad_width(video_file, capsys):
    rc = cli_mod.main([str(video_file), "", "1", "0"])
    assert rc == 1
    assert "width" in capsys.readouterr().err


@pytest.mark.parametrize("rate", ["nan", "inf"])
def test_cli_rejects_non_finite_interval(video_file, capsys, rate):
    rc = cli_mod.main([str(video_file), "", rate])
    assert rc == 1
    assert "interval" in capsys.readouterr().err
    assert _Recorder.runners == []
