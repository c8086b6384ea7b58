from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable

import structlog

from ecotrack.config import Settings
from ecotrack.db.session import get_engine, ping_database


DependencyCheck = Callable[[], None]

logger = structlog.get_logger(__name__)


@dataclass
class ReadinessReport:
    ready: bool
    checks: dict[str, str] = field(default_factory=dict)


class ReadinessChecker:
    """Runs blocking dependency checks in worker threads, each under a timeout.

    A check passes by returning and fails by raising. A slow check is reported
    as ``timeout`` rather than holding the whole report open.
    """

    def __init__(self, checks: dict[str, DependencyCheck] | None = None, timeout: float = 2.0) -> None:
        self.checks = dict(checks or {})
        self.timeout = timeout

    async def _run_one(self, name: str, check: DependencyCheck) -> str:
        try:
            await asyncio.wait_for(asyncio.to_thread(check), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("readiness_check_timeout", check=name, timeout_seconds=self.timeout)
            return "timeout"
        except Exception as exc:  # noqa: BLE001
            logger.warning("readiness_check_failed", check=name, error=str(exc))
            return f"error: {exc}"
        return "ok"

    async def run(self) -> ReadinessReport:
        names = list(self.checks)
        results = await asyncio.gather(*(self._run_one(name, self.checks[name]) for name in names))
        checks = dict(zip(names, results))
        return ReadinessReport(ready=all(result == "ok" for result in results), checks=checks)


def build_readiness_checker(settings: Settings) -> ReadinessChecker:
    checks: dict[str, DependencyCheck] = {}
    if settings.database_url:
        engine = get_engine(settings.database_url, settings.readiness_timeout_seconds)
        checks["database"] = lambda: ping_database(engine)
    return ReadinessChecker(checks, timeout=settings.readiness_timeout_seconds)
