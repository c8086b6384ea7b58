from __future__ import annotations

import os
import time
from typing import Protocol

import psutil

from ecotrack.models.schemas import MemoryUsage


class RuntimeInfo(Protocol):
    """Process facts reported by the status endpoint."""

    def uptime_seconds(self) -> float: ...

    def memory(self) -> MemoryUsage: ...

    def pid(self) -> int: ...


class ProcessRuntimeInfo:
    """RuntimeInfo for the current process, backed by psutil."""

    def __init__(self) -> None:
        self._process = psutil.Process(os.getpid())
        self._started = time.monotonic()

    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self._started, 3)

    def memory(self) -> MemoryUsage:
        info = self._process.memory_info()
        return MemoryUsage(rss=info.rss, vms=info.vms)

    def pid(self) -> int:
        return self._process.pid
