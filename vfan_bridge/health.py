"""Bridge status for the optional `/healthz` endpoint.

The supervisor pushes every state change and endpoint event into a
:class:`HealthReporter`; the aiohttp server only ever reads it. Both run
on the same event loop, so the reporter needs no locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from aiohttp import web

from .core.models import EndpointPair, SupervisorState

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class EndpointStatus:
    path: Optional[Path] = None
    available: bool = False
    error: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "path": str(self.path) if self.path is not None else None,
            "available": self.available,
            "error": self.error,
        }


class HealthReporter:
    """What the bridge currently knows about its serial and hwmon endpoints."""

    def __init__(self) -> None:
        self.state = SupervisorState.SEARCHING
        self.detail: Optional[str] = None
        self.state_since = _utcnow()
        self.serial = EndpointStatus()
        self.hwmon = EndpointStatus()
        self.connection_count = 0
        self.last_fault: Optional[str] = None

    @property
    def healthy(self) -> bool:
        return (
            self.state == SupervisorState.CONNECTED
            and self.serial.available
            and self.hwmon.available
        )

    def set_state(self, state: SupervisorState, detail: Optional[str] = None) -> None:
        if state != self.state:
            self.state_since = _utcnow()
        self.state = state
        self.detail = detail

    def endpoints_connected(self, pair: EndpointPair) -> None:
        self.serial = EndpointStatus(path=pair.device_path, available=True)
        self.hwmon = EndpointStatus(path=pair.hwmon_directory, available=True)
        self.connection_count += 1

    def serial_failed(self, reason: str) -> None:
        """Record a transport fault; the hwmon side is left as last seen."""
        self.serial = EndpointStatus(path=self.serial.path, available=False, error=reason)
        self.last_fault = reason

    def snapshot(self) -> Dict[str, Any]:
        return {
            "status": "ok" if self.healthy else "degraded",
            "state": self.state.value,
            "detail": self.detail,
            "since": self.state_since.isoformat(timespec="seconds"),
            "connections": self.connection_count,
            "lastFault": self.last_fault,
            "serial": self.serial.to_json(),
            "hwmon": self.hwmon.to_json(),
        }


class HealthServer:
    """Serves the reporter snapshot on `GET /healthz` (503 unless connected)."""

    def __init__(self, reporter: HealthReporter, host: str, port: int) -> None:
        self._reporter = reporter
        self._host = host
        self._port = port
        self._app = web.Application()
        self._app.router.add_get("/healthz", self._handle_health)
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        runner = web.AppRunner(self._app, access_log=None)
        await runner.setup()
        try:
            await web.TCPSite(runner, self._host, self._port).start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        LOGGER.info("Health endpoint on http://%s:%d/healthz", self._host, self._port)

    async def stop(self) -> None:
        runner, self._runner = self._runner, None
        if runner is not None:
            await runner.cleanup()

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = self._reporter.snapshot()
        return web.json_response(
            snapshot, status=200 if snapshot["status"] == "ok" else 503
        )
