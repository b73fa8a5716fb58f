# vttpreview/services/process/subprocess_runner.py
from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from typing import Optional, Sequence, Tuple

from vttpreview.common.logging import get_logger
from vttpreview.domain.errors import SubprocessFailureError, ToolMissingError
from vttpreview.domain.ports.process import ProcessOutput, ProcessRunnerPort


def shell_argv(command: str, platform: Optional[str] = None) -> Tuple[str, ...]:
    """Wrap a command line for the host shell (cmd.exe on Windows, bash elsewhere)."""
    p = platform or sys.platform
    if p in ("win32", "cygwin"):
        return ("cmd.exe", "/c", command)
    return ("/bin/bash", "-c", command)


class SubprocessRunner(ProcessRunnerPort):
    """
    Infrastructure adapter implementing ProcessRunnerPort with `subprocess.run`.

    Output and error streams are captured and returned together. A non-zero
    exit is always a failure; output on stderr is a failure too unless
    `fail_on_stderr=False` (ffmpeg/ImageMagick are run quiet so stderr only
    carries errors).
    """

    def __init__(self, *, fail_on_stderr: bool = True, logger: Optional[logging.Logger] = None):
        self.fail_on_stderr = fail_on_stderr
        self.log = logger or get_logger()

    # ---- Port API -------------------------------------------------------------
    def run(self, args: Sequence[str]) -> ProcessOutput:
        argv = tuple(str(a) for a in args)
        if not argv:
            raise ValueError("No command provided to run().")
        return self._execute(argv)

    def run_shell(self, command: str) -> ProcessOutput:
        if not command or not command.strip():
            raise ValueError("No command provided to run_shell().")
        return self._execute(shell_argv(command))

    # ---- internals ------------------------------------------------------------
    def _execute(self, argv: Tuple[str, ...]) -> ProcessOutput:
        self.log.debug("exec: %s", shlex.join(argv))
        try:
            proc = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                errors="replace",
                check=False,  # we handle rc manually to attach stderr
            )
        except FileNotFoundError as e:
            raise ToolMissingError(f"{argv[0]} not found; install it or put it on PATH", tool=argv[0]) from e
        except OSError as e:
            raise SubprocessFailureError(f"Failed to execute {argv[0]} (OS error): {e}", cmd=argv) from e

        out = ProcessOutput(args=argv, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")

        if out.returncode != 0:
            self.log.error("%s exited with %s: %s", argv[0], out.returncode, out.stderr.strip())
            raise SubprocessFailureError(
                f"{argv[0]} returned non-zero exit code",
                cmd=argv, returncode=out.returncode, stderr=out.stderr,
            )
        if self.fail_on_stderr and out.stderr.strip():
            self.log.error("%s wrote to stderr: %s", argv[0], out.stderr.strip())
            raise SubprocessFailureError(
                f"{argv[0]} reported errors",
                cmd=argv, returncode=out.returncode, stderr=out.stderr,
            )
        return out
