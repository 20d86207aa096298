"""Serial link to the fan microcontroller built on pyserial-asyncio."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

import serial
import serial_asyncio

from .. import constants

LOGGER = logging.getLogger(__name__)


class TransportError(ConnectionError):
    """Raised when the serial link fails to open, read or write."""


class SerialTransport:
    """Line-oriented wrapper around an asyncio serial stream pair."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        name: str = "serial",
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._name = name
        self._closed = False

    @classmethod
    async def open(
        cls, device_path: Path, *, baudrate: int = constants.DEFAULT_BAUDRATE
    ) -> "SerialTransport":
        """Open ``device_path`` as an 8N1 serial port."""

        try:
            reader, writer = await serial_asyncio.open_serial_connection(
                url=str(device_path),
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
            )
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"cannot open {device_path}: {exc}") from exc

        LOGGER.debug("Opened %s at %d baud", device_path, baudrate)
        return cls(reader, writer, name=str(device_path))

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    async def readline(self) -> bytes:
        if self._closed:
            raise TransportError(f"{self._name} is closed")
        try:
            line = await self._reader.readline()
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"read from {self._name} failed: {exc}") from exc
        except (ValueError, asyncio.LimitOverrunError) as exc:
            raise TransportError(
                f"{self._name} sent a line longer than the stream limit: {exc}"
            ) from exc
        if not line:
            raise TransportError(f"{self._name} reached end of stream")
        return line

    async def write(self, data: bytes) -> None:
        if self._closed or self._writer.is_closing():
            raise TransportError(f"{self._name} is closed")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"write to {self._name} failed: {exc}") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        with contextlib.suppress(Exception):
            await self._writer.wait_closed()
        LOGGER.debug("Closed %s", self._name)
