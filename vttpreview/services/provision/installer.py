# vttpreview/services/provision/installer.py
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

from vttpreview.common.logging import get_logger
from vttpreview.common.settings import Settings, get_settings
from vttpreview.domain.enums.host_platform import HostPlatform
from vttpreview.domain.errors import PreviewError, ToolMissingError
from vttpreview.domain.ports.process import ProcessRunnerPort
from vttpreview.domain.ports.provisioning import ToolProvisionerPort, ToolSpec


class InstallStrategy(Protocol):
    def install_command(self, package: str) -> str: ...


class AptInstallStrategy:
    """Assumes apt-get is available and sudo is allowed."""

    def install_command(self, package: str) -> str:
        return f"sudo apt-get update && sudo apt-get install -y {package}"


class HomebrewInstallStrategy:
    def install_command(self, package: str) -> str:
        return f"brew install {package}"


class ChocolateyInstallStrategy:
    def install_command(self, package: str) -> str:
        return f"choco install -y {package}"


STRATEGIES: Dict[HostPlatform, InstallStrategy] = {
    HostPlatform.linux: AptInstallStrategy(),
    HostPlatform.macos: HomebrewInstallStrategy(),
    HostPlatform.windows: ChocolateyInstallStrategy(),
}


def strategy_for(platform: HostPlatform) -> Optional[InstallStrategy]:
    return STRATEGIES.get(platform)


def _default_which(binary: str) -> Optional[str]:
    if Path(binary).is_absolute():
        return binary if Path(binary).exists() else None
    return shutil.which(binary)


class ToolInstaller(ToolProvisionerPort):
    """
    Makes sure external tools are on the host before the pipeline starts.
    Idempotent: tools already present are never reinstalled.
    Installation only happens when `auto_install_tools` is enabled.
    """

    def __init__(
        self,
        runner: ProcessRunnerPort,
        *,
        platform: Optional[HostPlatform] = None,
        auto_install: Optional[bool] = None,
        which: Callable[[str], Optional[str]] = _default_which,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        cfg = settings or get_settings()
        self.runner = runner
        self.platform = platform or HostPlatform.current()
        self.auto_install = cfg.auto_install_tools if auto_install is None else bool(auto_install)
        self.which = which
        self.log = logger or get_logger()

    def is_installed(self, tool: ToolSpec) -> bool:
        return all(self.which(b) for b in tool.binaries)

    def ensure_installed(self, tool: ToolSpec) -> bool:
        if self.is_installed(tool):
            self.log.debug("%s present (%s)", tool.name, ", ".join(tool.binaries))
            return True

        if not self.auto_install:
            raise ToolMissingError(
                f"{tool.name} not found (need {', '.join(tool.binaries)}); install it or enable AUTO_INSTALL_TOOLS",
                tool=tool.name,
            )

        strategy = strategy_for(self.platform)
        if strategy is None:
            raise ToolMissingError(f"cannot install {tool.name}: unsupported platform {self.platform}", tool=tool.name)

        command = strategy.install_command(tool.package)
        self.log.info("installing %s: %s", tool.name, command)
        try:
            self.runner.run_shell(command)
        except PreviewError as e:
            # package managers write progress to stderr; the re-check below decides
            self.log.warning("install command for %s reported: %s", tool.name, e)

        if not self.is_installed(tool):
            raise ToolMissingError(f"{tool.name} still missing after running: {command}", tool=tool.name)
        return True
