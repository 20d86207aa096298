"""Data pumps moving values between the hwmon files and the serial link.

Two loops run per connection:

* :class:`DutyWriter` polls ``pwm1`` and forwards changes as duty commands.
* :class:`TelemetryReader` consumes firmware lines and publishes ``fan1_input``.

Both share one transport. The writer only writes to it, the reader only
reads from it, and neither closes it; the supervisor owns the handle.
A :class:`~vfan_bridge.adapters.serial.TransportError` in either loop
ends the pair, any other fault is absorbed per line or per tick.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .adapters.serial import TransportError
from .adapters.sysfs import SysfsError, read_int, write_int
from .core.models import TelemetryRecord
from .core.protocols import LineTransport
from .protocol import (
    DecodeError,
    decode_telemetry,
    encode_duty_command,
    looks_like_json_object,
    scale_pwm_to_percent,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_DUTY_POLL_INTERVAL = 0.2


class DutyWriter:
    """Forwards hwmon PWM changes to the firmware as ``set_duty`` commands."""

    def __init__(
        self,
        transport: LineTransport,
        pwm_path: Path,
        *,
        interval: float = DEFAULT_DUTY_POLL_INTERVAL,
    ) -> None:
        self._transport = transport
        self._pwm_path = pwm_path
        self._interval = max(interval, 0.01)
        self._last_sent: Optional[int] = None

    @property
    def last_sent(self) -> Optional[int]:
        """Raw PWM value most recently delivered to the transport."""
        return self._last_sent

    def read_pwm(self) -> int:
        try:
            return read_int(self._pwm_path)
        except SysfsError as exc:
            LOGGER.debug("PWM read failed, assuming 0: %s", exc)
            return 0

    async def tick(self) -> bool:
        """Send the current PWM value if it changed. Returns True when sent."""

        value = self.read_pwm()
        if value == self._last_sent:
            return False

        percent = scale_pwm_to_percent(value)
        await self._transport.write(encode_duty_command(percent))
        self._last_sent = value
        LOGGER.debug("Sent duty %d%% (pwm=%d)", percent, value)
        return True

    async def run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await self.tick()
            except TransportError as exc:
                LOGGER.warning("Duty write failed, link presumed lost: %s", exc)
                raise

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
                break
            except asyncio.TimeoutError:
                continue


class TelemetryReader:
    """Publishes firmware RPM reports to the hwmon ``fan1_input`` file."""

    def __init__(
        self,
        transport: LineTransport,
        rpm_path: Path,
        *,
        read_timeout: Optional[float] = None,
    ) -> None:
        self._transport = transport
        self._rpm_path = rpm_path
        self._read_timeout = read_timeout if read_timeout and read_timeout > 0 else None

    async def _read_line(self) -> bytes:
        if self._read_timeout is None:
            return await self._transport.readline()
        try:
            return await asyncio.wait_for(
                self._transport.readline(), timeout=self._read_timeout
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"no data received for {self._read_timeout:.1f}s"
            ) from exc

    def handle_line(self, line: bytes) -> Optional[TelemetryRecord]:
        """Apply one firmware line; returns the record written, if any."""

        text = line.decode("utf-8", errors="replace").strip()
        if not text:
            return None

        if not looks_like_json_object(text):
            LOGGER.info("firmware: %s", text)
            return None

        try:
            record = decode_telemetry(text)
        except DecodeError as exc:
            LOGGER.debug("Discarding undecodable line %r: %s", text, exc)
            return None

        try:
            write_int(self._rpm_path, record.rpm)
        except SysfsError as exc:
            LOGGER.warning("RPM write failed: %s", exc)
            return None

        LOGGER.debug("Fan at %d RPM (duty %d%%)", record.rpm, record.duty)
        return record

    async def run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                line = await self._read_line()
            except TransportError as exc:
                LOGGER.warning("Serial read failed, link presumed lost: %s", exc)
                raise
            self.handle_line(line)


async def run_pump_pair(
    duty_writer: DutyWriter,
    telemetry_reader: TelemetryReader,
    stop_event: Optional[asyncio.Event] = None,
) -> Optional[TransportError]:
    """Run both pumps until one of them exits.

    The surviving pump is stopped through ``stop_event`` and cancellation
    before this coroutine returns, so the caller may close the transport
    immediately afterwards.

    Returns:
        The transport fault that ended the pair, or ``None`` if the pair
        was stopped through ``stop_event``.

    Raises:
        Exception: Anything other than a transport fault is a bug and is
            re-raised.
    """

    stop = stop_event or asyncio.Event()
    tasks = [
        asyncio.create_task(duty_writer.run(stop), name="duty-writer"),
        asyncio.create_task(telemetry_reader.run(stop), name="telemetry-reader"),
    ]

    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stop.set()
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    for task in tasks:
        if task not in done or task.cancelled():
            continue
        exc = task.exception()
        if exc is None:
            continue
        if isinstance(exc, TransportError):
            LOGGER.info("Pump %s ended the connection: %s", task.get_name(), exc)
            return exc
        raise exc

    return None
