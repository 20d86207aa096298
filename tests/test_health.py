from pathlib import Path

import aiohttp
import pytest

from vfan_bridge.core.models import EndpointPair, SupervisorState
from vfan_bridge.health import HealthReporter, HealthServer

PAIR = EndpointPair(
    device_path=Path("/dev/serial/by-id/usb-Raspberry_Pi_Pico_abc"),
    hwmon_directory=Path("/sys/class/hwmon/hwmon3"),
)


def test_reporter_starts_degraded_while_searching():
    reporter = HealthReporter()

    snapshot = reporter.snapshot()

    assert snapshot["status"] == "degraded"
    assert snapshot["state"] == "searching"
    assert snapshot["connections"] == 0
    assert snapshot["lastFault"] is None
    assert snapshot["serial"] == {"path": None, "available": False, "error": None}


def test_reporter_ok_only_while_connected():
    reporter = HealthReporter()

    reporter.endpoints_connected(PAIR)
    reporter.set_state(SupervisorState.CONNECTED, str(PAIR.device_path))

    snapshot = reporter.snapshot()
    assert snapshot["status"] == "ok"
    assert snapshot["detail"] == str(PAIR.device_path)
    assert snapshot["connections"] == 1
    assert snapshot["hwmon"]["path"] == "/sys/class/hwmon/hwmon3"

    reporter.set_state(SupervisorState.DRAINING, "closing transport")

    assert reporter.snapshot()["status"] == "degraded"


def test_reporter_records_serial_fault():
    reporter = HealthReporter()
    reporter.endpoints_connected(PAIR)
    reporter.set_state(SupervisorState.CONNECTED)

    reporter.serial_failed("device reports readiness to read but returned no data")

    snapshot = reporter.snapshot()
    assert reporter.healthy is False
    assert snapshot["lastFault"] == "device reports readiness to read but returned no data"
    assert snapshot["serial"]["available"] is False
    assert snapshot["serial"]["path"] == str(PAIR.device_path)
    assert snapshot["hwmon"]["available"] is True


def test_state_since_changes_only_on_new_state():
    reporter = HealthReporter()
    reporter.set_state(SupervisorState.SEARCHING, "locating endpoints")
    since = reporter.state_since

    reporter.set_state(SupervisorState.SEARCHING, "still locating")
    assert reporter.state_since == since

    reporter.set_state(SupervisorState.CONNECTED)
    assert reporter.state_since >= since
    assert reporter.state == SupervisorState.CONNECTED


@pytest.mark.asyncio
async def test_health_server_serves_snapshot(unused_tcp_port):
    reporter = HealthReporter()
    reporter.endpoints_connected(PAIR)
    reporter.set_state(SupervisorState.CONNECTED)

    server = HealthServer(reporter, "127.0.0.1", unused_tcp_port)
    await server.start()

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"http://127.0.0.1:{unused_tcp_port}/healthz"
            ) as response:
                payload = await response.json()
                assert response.status == 200
                assert payload["status"] == "ok"
                assert payload["state"] == "connected"
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_health_server_reports_degraded_with_503(unused_tcp_port):
    server = HealthServer(HealthReporter(), "127.0.0.1", unused_tcp_port)
    await server.start()

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"http://127.0.0.1:{unused_tcp_port}/healthz"
            ) as response:
                assert response.status == 503
    finally:
        await server.stop()
        await server.stop()
