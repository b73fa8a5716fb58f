from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, Tuple


@dataclass(frozen=True)
class ProcessOutput:
    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


class ProcessRunnerPort(Protocol):
    def run(self, args: Sequence[str]) -> ProcessOutput: ...           # executable + argv, no shell

    def run_shell(self, command: str) -> ProcessOutput: ...            # interpreted by the host shell
