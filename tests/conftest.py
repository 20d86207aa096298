import asyncio
from pathlib import Path
from typing import Iterable, Optional

import pytest

from vfan_bridge.adapters.serial import TransportError


class FakeTransport:
    """In-memory stand-in for the serial link used by pump and supervisor tests."""

    def __init__(self, lines: Iterable[bytes] = (), *, fail_writes: bool = False) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        for line in lines:
            self._queue.put_nowait(line)
        self.fail_writes = fail_writes
        self.written: list[bytes] = []
        self.close_calls = 0
        self.closed = False

    def feed(self, line: bytes) -> None:
        self._queue.put_nowait(line)

    def fail(self, message: str = "device unplugged") -> None:
        self._queue.put_nowait(TransportError(message))

    async def readline(self) -> bytes:
        item = await self._queue.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def write(self, data: bytes) -> None:
        if self.fail_writes or self.closed:
            raise TransportError("write failed")
        self.written.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FakeStreamWriter:
    """Stands in for the asyncio StreamWriter behind a SerialTransport."""

    def __init__(self, *, drain_error: Optional[Exception] = None) -> None:
        self.buffer = bytearray()
        self.drain_error = drain_error
        self.close_calls = 0
        self._closing = False

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        if self.drain_error is not None:
            raise self.drain_error

    def is_closing(self) -> bool:
        return self._closing

    def close(self) -> None:
        self.close_calls += 1
        self._closing = True

    async def wait_closed(self) -> None:
        return None


@pytest.fixture
def fake_stream_writer():
    return FakeStreamWriter


@pytest.fixture
def fake_transport():
    def _create(lines: Iterable[bytes] = (), *, fail_writes: bool = False) -> FakeTransport:
        return FakeTransport(lines, fail_writes=fail_writes)

    return _create


@pytest.fixture
def hwmon_dir(tmp_path: Path):
    """Create a hwmon directory carrying the virtual fan marker."""

    def _create(name: str = "hwmon3", *, pwm: Optional[int] = 0, marker: str = "vFanByTk\n") -> Path:
        directory = tmp_path / "hwmon" / name
        (directory / "device").mkdir(parents=True)
        (directory / "device" / "marker").write_text(marker, encoding="utf-8")
        if pwm is not None:
            (directory / "pwm1").write_text(f"{pwm}\n", encoding="ascii")
        return directory

    return _create
