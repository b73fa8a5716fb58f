from __future__ import annotations

import sys
from enum import StrEnum


class HostPlatform(StrEnum):
    linux = "linux"
    macos = "macos"
    windows = "windows"
    unknown = "unknown"

    @classmethod
    def current(cls, platform: str | None = None) -> "HostPlatform":
        p = (platform or sys.platform).lower()
        if p.startswith("linux"):
            return cls.linux
        if p == "darwin":
            return cls.macos
        if p in ("win32", "cygwin"):
            return cls.windows
        return cls.unknown
