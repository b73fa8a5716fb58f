import logging
import sys

import pytest

from vttpreview.domain.errors import SubprocessFailureError, ToolMissingError
from vttpreview.services.process.subprocess_runner import SubprocessRunner, shell_argv

PY = sys.executable


def test_run_captures_stdout():
    out = SubprocessRunner().run([PY, "-c", "print('hello')"])
    assert out.returncode == 0
    assert out.stdout.strip() == "hello"
    assert out.stderr == ""
    assert out.args[0] == PY


def test_non_zero_exit_raises_with_stderr():
    with pytest.raises(SubprocessFailureError) as ei:
        SubprocessRunner().run([PY, "-c", "import sys; sys.stderr.write('bad input'); sys.exit(3)"])
    assert ei.value.returncode == 3
    assert "bad input" in ei.value.stderr
    assert ei.value.cmd[0] == PY


def test_stderr_on_success_is_a_failure_by_default():
    code = "import sys; sys.stderr.write('warning: something')"
    with pytest.raises(SubprocessFailureError) as ei:
        SubprocessRunner().run([PY, "-c", code])
    assert ei.value.returncode == 0
    out = SubprocessRunner(fail_on_stderr=False).run([PY, "-c", code])
    assert "warning" in out.stderr


def test_missing_executable_is_tool_missing():
    with pytest.raises(ToolMissingError) as ei:
        SubprocessRunner().run(["definitely-not-a-real-tool-xyz", "--version"])
    assert ei.value.tool == "definitely-not-a-real-tool-xyz"


def test_empty_command_rejected():
    with pytest.raises(ValueError):
        SubprocessRunner().run([])
    with pytest.raises(ValueError):
        SubprocessRunner().run_shell("   ")


def test_shell_argv_per_platform():
    assert shell_argv("echo hi", platform="linux") == ("/bin/bash", "-c", "echo hi")
    assert shell_argv("echo hi", platform="darwin") == ("/bin/bash", "-c", "echo hi")
    assert shell_argv("echo hi", platform="win32") == ("cmd.exe", "/c", "echo hi")


@pytest.mark.skipif(sys.platform == "win32", reason="bash form")
def test_run_shell_interprets_command():
    out = SubprocessRunner().run_shell("echo one && echo two")
    assert out.stdout.split() == ["one", "two"]


def test_commands_are_logged_to_injected_logger(caplog):
    log = logging.getLogger("vttpreview.test.runner")
    with caplog.at_level(logging.DEBUG, logger="vttpreview.test.runner"):
        SubprocessRunner(logger=log).run([PY, "-c", "pass"])
    assert any("exec:" in r.getMessage() for r in caplog.records)
