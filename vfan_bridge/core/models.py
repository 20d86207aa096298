"""Domain models exchanged between the bridge components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class TelemetryRecord:
    """One status report from the fan firmware."""

    rpm: int
    duty: int


@dataclass(frozen=True, slots=True)
class DutyCommand:
    set_duty: int


@dataclass(frozen=True, slots=True)
class EndpointPair:
    """Serial device and hwmon directory resolved for a single connection attempt."""

    device_path: Path
    hwmon_directory: Path


class SupervisorState(str, Enum):
    """Lifecycle state of the bridge connection."""

    SEARCHING = "searching"
    """Waiting for the serial device and the hwmon directory to appear."""

    CONNECTED = "connected"
    """Transport open and pump pair running."""

    DRAINING = "draining"
    """Pump pair ended; closing the transport and cooling down."""

    STOPPED = "stopped"
    """Supervisor left its loop because shutdown was requested."""
