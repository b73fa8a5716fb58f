# tests/helpers/fakes.py
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

from PIL import Image

from vttpreview.domain.errors import SubprocessFailureError, ToolMissingError
from vttpreview.domain.ports.process import ProcessOutput
from vttpreview.domain.ports.provisioning import ToolSpec


def write_jpeg(path: Path, size=(320, 180), color=(40, 80, 120)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="JPEG")
    return path


class FakeMediaRunner:
    """
    Stands in for ffmpeg / mogrify / montage without spawning anything:
      - ffmpeg writes `frames` JPEGs of `source_size` at the output pattern
      - mogrify resizes each file to the requested width, keeping aspect
      - montage writes a blank image of columns*w x rows*h
    `fail` maps a binary name to stderr text that makes it fail;
    `missing` holds binaries that behave as not installed;
    `interrupt` holds binaries that raise KeyboardInterrupt after doing their work.
    """

    def __init__(self, frames: int = 10, source_size=(320, 180)):
        self.frames = frames
        self.source_size = source_size
        self.calls: List[List[str]] = []
        self.shell_calls: List[str] = []
        self.fail: Dict[str, str] = {}
        self.missing: Set[str] = set()
        self.interrupt: Set[str] = set()

    def run(self, args: Sequence[str]) -> ProcessOutput:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        binary = Path(argv[0]).name
        if binary in self.missing:
            raise ToolMissingError(f"{binary} not found", tool=binary)
        if binary in self.fail:
            raise SubprocessFailureError(f"{binary} failed", cmd=argv, returncode=1, stderr=self.fail[binary])
        handler = getattr(self, f"_{binary}", None)
        if handler is not None:
            handler(argv)
        if binary in self.interrupt:
            raise KeyboardInterrupt
        return ProcessOutput(args=tuple(argv), returncode=0)

    def run_shell(self, command: str) -> ProcessOutput:
        self.shell_calls.append(command)
        return ProcessOutput(args=("/bin/bash", "-c", command), returncode=0)

    def binaries(self) -> List[str]:
        return [Path(c[0]).name for c in self.calls]

    # ---- tool emulation --------------------------------------------------
    def _ffmpeg(self, argv: List[str]) -> None:
        pattern = argv[-1]
        for i in range(1, self.frames + 1):
            write_jpeg(Path(pattern % i), self.source_size)

    def _mogrify(self, argv: List[str]) -> None:
        width = int(argv[argv.index("-resize") + 1].rstrip("x"))
        for f in argv[argv.index("-resize") + 2:]:
            with Image.open(f) as im:
                height = round(im.height * width / im.width)
                resized = im.resize((width, height))
            resized.save(f, format="JPEG")

    def _montage(self, argv: List[str]) -> None:
        m = re.fullmatch(r"(\d+)x(\d+)", argv[argv.index("-tile") + 1])
        columns, rows = int(m.group(1)), int(m.group(2))
        first = argv[argv.index("-tile") + 2]
        with Image.open(first) as im:
            w, h = im.size
        write_jpeg(Path(argv[-1]), (columns * w, rows * h), (0, 0, 0))


class FakeProvisioner:
    def __init__(self, missing: Optional[Set[str]] = None):
        self.missing = set(missing or ())
        self.checked: List[ToolSpec] = []

    def ensure_installed(self, tool: ToolSpec) -> bool:
        self.checked.append(tool)
        if tool.name in self.missing:
            raise ToolMissingError(f"{tool.name} not found", tool=tool.name)
        return True


