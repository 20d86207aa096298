"""Connection supervision for the serial/hwmon bridge.

The supervisor is the only long-lived task in the bridge. It cycles
through three states for as long as the process runs:

* ``SEARCHING``: poll the locator until both endpoints exist, then open
  the serial transport.
* ``CONNECTED``: run the pump pair until either pump reports a
  transport fault.
* ``DRAINING``: stop the surviving pump, close the transport, cool down.

Endpoint loss is routine (USB unplug, driver reload), so no fault that
the pumps or the locator can classify ever ends the loop.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple

from .adapters.serial import TransportError
from .config import BridgeConfig, HwmonConfig
from .core.models import EndpointPair, SupervisorState
from .core.protocols import LineTransport
from .health import HealthReporter
from .locator import EndpointLocator
from .pumps import DutyWriter, TelemetryReader, run_pump_pair

LOGGER = logging.getLogger(__name__)

TransportOpener = Callable[[Path], Awaitable[LineTransport]]
StateListener = Callable[[SupervisorState, SupervisorState], Optional[Awaitable[None]]]


class ConnectionSupervisor:
    """Owns one connection at a time and reconnects forever.

    Invariants:
    - At most one transport is open, and it is closed before the next
      search begins.
    - The transport is closed here and nowhere else; pumps only read or
      write it.
    """

    def __init__(
        self,
        *,
        locator: EndpointLocator,
        open_transport: TransportOpener,
        bridge_config: Optional[BridgeConfig] = None,
        hwmon_config: Optional[HwmonConfig] = None,
        read_timeout: Optional[float] = None,
        health: Optional[HealthReporter] = None,
    ) -> None:
        self._locator = locator
        self._open_transport = open_transport
        self._bridge = bridge_config or BridgeConfig()
        self._hwmon = hwmon_config or HwmonConfig()
        self._read_timeout = read_timeout
        self._health = health

        self._state = SupervisorState.SEARCHING
        self._stop_event = asyncio.Event()
        self._pump_stop: Optional[asyncio.Event] = None
        self._listeners: list[StateListener] = []
        self._connection_count = 0

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def connection_count(self) -> int:
        """Number of transports opened since the supervisor was created."""
        return self._connection_count

    def register_state_listener(self, listener: StateListener) -> None:
        """Register ``listener(previous, current)`` for state transitions."""
        self._listeners.append(listener)

    def stop(self) -> None:
        """Request shutdown; the running loop exits at its next suspension point."""
        self._stop_event.set()
        if self._pump_stop is not None:
            self._pump_stop.set()

    async def run(self) -> None:
        """Supervise connections until :meth:`stop` is called."""

        try:
            while not self._stop_event.is_set():
                attempt = await self._search()
                if attempt is None:
                    break

                pair, transport = attempt
                try:
                    await self._serve(pair, transport)
                except asyncio.CancelledError:
                    self.stop()
                    raise
                finally:
                    await self._drain(transport)
        finally:
            await self._transition(SupervisorState.STOPPED, detail="shutdown")

    async def _search(self) -> Optional[Tuple[EndpointPair, LineTransport]]:
        await self._transition(SupervisorState.SEARCHING, detail="locating endpoints")
        announced = False

        while not self._stop_event.is_set():
            pair = self._locator.locate()
            if pair is None:
                log = LOGGER.debug if announced else LOGGER.info
                log(
                    "Waiting for hardware; retrying in %.1fs",
                    self._bridge.search_interval_seconds,
                )
                announced = True
            else:
                try:
                    transport = await self._open_transport(pair.device_path)
                except TransportError as exc:
                    LOGGER.warning("Failed to open %s: %s", pair.device_path, exc)
                    if self._health is not None:
                        self._health.serial_failed(str(exc))
                else:
                    self._connection_count += 1
                    return pair, transport

            if await self._wait(self._bridge.search_interval_seconds):
                break

        return None

    async def _serve(self, pair: EndpointPair, transport: LineTransport) -> None:
        LOGGER.info(
            "Connected: serial %s, hwmon %s", pair.device_path, pair.hwmon_directory
        )
        if self._health is not None:
            self._health.endpoints_connected(pair)
        await self._transition(SupervisorState.CONNECTED, detail=str(pair.device_path))

        duty_writer = DutyWriter(
            transport,
            pair.hwmon_directory / self._hwmon.pwm_file,
            interval=self._bridge.duty_poll_interval_seconds,
        )
        telemetry_reader = TelemetryReader(
            transport,
            pair.hwmon_directory / self._hwmon.rpm_file,
            read_timeout=self._read_timeout,
        )

        self._pump_stop = asyncio.Event()
        if self._stop_event.is_set():
            self._pump_stop.set()

        fault = await run_pump_pair(duty_writer, telemetry_reader, self._pump_stop)
        if fault is not None and self._health is not None:
            self._health.serial_failed(str(fault))

    async def _drain(self, transport: LineTransport) -> None:
        await self._transition(SupervisorState.DRAINING, detail="closing transport")
        if self._pump_stop is not None:
            self._pump_stop.set()
        self._pump_stop = None

        await transport.close()
        LOGGER.info("Hardware connection closed; reconnecting")

        await self._wait(self._bridge.cooldown_seconds)

    async def _wait(self, timeout: float) -> bool:
        """Sleep for ``timeout`` seconds; returns True if stop was requested."""
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(timeout, 0.0))
            return True
        except asyncio.TimeoutError:
            return False

    async def _transition(
        self, state: SupervisorState, *, detail: Optional[str] = None
    ) -> None:
        previous = self._state
        self._state = state

        if previous != state:
            LOGGER.info(
                "Bridge state transition %s -> %s (%s)",
                previous.value,
                state.value,
                detail or state.value,
            )

        if self._health is not None:
            self._health.set_state(state, detail or state.value)

        if previous == state:
            return

        for listener in self._listeners:
            try:
                result = listener(previous, state)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                LOGGER.warning("State listener failed", exc_info=True)

