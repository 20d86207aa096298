"""Main application entry-point for vfan-bridge."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from pathlib import Path
from typing import Optional

from .adapters.serial import SerialTransport
from .config import VFanConfig, load_config
from .core.protocols import LineTransport
from .health import HealthReporter, HealthServer
from .locator import EndpointLocator
from .logging import configure_logging
from .supervisor import ConnectionSupervisor

LOGGER = logging.getLogger(__name__)


class VFanBridgeApp:
    """Coordinates application startup and shutdown.

    The application wires the configured locator and serial transport
    into a :class:`ConnectionSupervisor`, optionally exposes the health
    endpoint, and keeps the supervisor running until a shutdown signal.
    """

    def __init__(
        self,
        config: Optional[VFanConfig] = None,
        *,
        locator: Optional[EndpointLocator] = None,
    ) -> None:
        self._config = config or load_config()
        self._locator = locator or EndpointLocator.from_config(self._config)
        self._health = HealthReporter()
        self._health_server: Optional[HealthServer] = None
        self._supervisor: Optional[ConnectionSupervisor] = None

    @property
    def health(self) -> HealthReporter:
        return self._health

    @property
    def supervisor(self) -> Optional[ConnectionSupervisor]:
        return self._supervisor

    async def _open_transport(self, device_path: Path) -> LineTransport:
        return await SerialTransport.open(
            device_path, baudrate=self._config.serial.baudrate
        )

    def build_supervisor(self) -> ConnectionSupervisor:
        return ConnectionSupervisor(
            locator=self._locator,
            open_transport=self._open_transport,
            bridge_config=self._config.bridge,
            hwmon_config=self._config.hwmon,
            read_timeout=self._config.serial.read_timeout_seconds,
            health=self._health,
        )

    async def run(self) -> None:
        """Run the supervisor until it is stopped or the task is cancelled."""

        LOGGER.info("vfan-bridge starting with config: %s", self._config.path)
        self._supervisor = self.build_supervisor()

        loop = asyncio.get_running_loop()
        for signum in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(signum, self.stop)

        await self._start_health_server()
        try:
            await self._supervisor.run()
        except asyncio.CancelledError:
            LOGGER.info("vfan-bridge received shutdown signal")
            raise
        finally:
            await self._stop_health_server()
            for signum in (signal.SIGTERM, signal.SIGINT):
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(signum)
            LOGGER.info("vfan-bridge stopped")

    def stop(self) -> None:
        if self._supervisor is not None:
            LOGGER.info("Shutdown requested")
            self._supervisor.stop()

    @classmethod
    def start(cls, config: Optional[VFanConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            verbose_libraries=instance._config.logging.verbose_libraries,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("vfan-bridge received shutdown signal")

    async def _start_health_server(self) -> None:
        health = self._config.health
        if not health.enabled or health.port <= 0:
            return

        server = HealthServer(self._health, health.host, health.port)
        try:
            await server.start()
        except OSError as exc:
            LOGGER.error("Failed to start health endpoint: %s", exc)
        else:
            self._health_server = server

    async def _stop_health_server(self) -> None:
        if self._health_server is None:
            return
        await self._health_server.stop()
        self._health_server = None
