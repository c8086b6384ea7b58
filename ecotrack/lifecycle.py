"""Graceful shutdown: stop taking traffic, drain in-flight requests, exit 0."""

from __future__ import annotations

import asyncio
import contextvars
import signal
from types import FrameType

import structlog
import uvicorn


logger = structlog.get_logger(__name__)


class ShutdownCoordinator:
    """Tracks in-flight requests and whether the process is draining."""

    def __init__(self, grace_period: float = 10.0) -> None:
        self.grace_period = grace_period
        self._in_flight = 0
        self._draining = False
        self._idle: asyncio.Event | None = None

    def _idle_event(self) -> asyncio.Event:
        if self._idle is None:
            self._idle = asyncio.Event()
            if self._in_flight == 0:
                self._idle.set()
        return self._idle

    @property
    def draining(self) -> bool:
        return self._draining

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def begin_drain(self) -> None:
        self._draining = True

    def request_started(self) -> None:
        self._in_flight += 1
        self._idle_event().clear()

    def request_finished(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        if self._in_flight == 0:
            self._idle_event().set()

    async def wait_for_drain(self, timeout: float | None = None) -> bool:
        """Wait until no request is in flight. Returns False if ``timeout`` elapsed first."""

        timeout = self.grace_period if timeout is None else timeout
        try:
            await asyncio.wait_for(self._idle_event().wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


class GracefulServer(uvicorn.Server):
    """uvicorn server that announces the shutdown signal and flags draining.

    uvicorn itself stops the listener and waits ``timeout_graceful_shutdown``
    seconds for open requests before running the lifespan shutdown.
    """

    def __init__(self, config: uvicorn.Config, coordinator: ShutdownCoordinator) -> None:
        super().__init__(config)
        self.coordinator = coordinator

    def _log_signal(self, sig: int) -> None:
        logger.info(
            "shutdown_signal_received",
            signal=signal.Signals(sig).name,
            in_flight=self.coordinator.in_flight,
            grace_period_seconds=self.coordinator.grace_period,
        )

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        # The handler interrupts whatever request is running; log outside its bound context.
        contextvars.Context().run(self._log_signal, sig)
        self.coordinator.begin_drain()
        super().handle_exit(sig, frame)
        # Newer uvicorn re-raises captured signals after serving; a drained exit is a clean exit.
        captured = getattr(self, "_captured_signals", None)
        if captured:
            captured.clear()
