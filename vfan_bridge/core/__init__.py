"""Core primitives for vfan-bridge."""

from .models import DutyCommand, EndpointPair, SupervisorState, TelemetryRecord
from .protocols import LineTransport

__all__ = [
    "DutyCommand",
    "EndpointPair",
    "LineTransport",
    "SupervisorState",
    "TelemetryRecord",
]
