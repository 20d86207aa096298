"""Line protocol spoken with the fan microcontroller.

Frames are single JSON objects terminated by ``\\n``:

* host to device: ``{"set_duty": <0-100>}``
* device to host: ``{"rpm": <int>, "duty": <int>}``

Anything else the firmware prints (boot banners, tracebacks) is treated
as log output by the telemetry reader.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Union

from . import constants
from .core.models import DutyCommand, TelemetryRecord


class DecodeError(ValueError):
    """Raised when a line cannot be decoded into a telemetry record."""


def _to_text(line: Union[str, bytes]) -> str:
    if isinstance(line, bytes):
        return line.decode("utf-8", errors="replace")
    return line


def looks_like_json_object(line: Union[str, bytes]) -> bool:
    text = _to_text(line).strip()
    return text.startswith("{") and text.endswith("}")


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"field {key!r} must be an integer, got {value!r}")
    return value


def decode_telemetry(line: Union[str, bytes]) -> TelemetryRecord:
    """Decode one telemetry line into a :class:`TelemetryRecord`.

    Raises:
        DecodeError: If the line is not a JSON object with integer ``rpm``
            and ``duty`` fields in range.
    """

    text = _to_text(line).strip()
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise DecodeError(f"expected a JSON object, got {type(payload).__name__}")

    rpm = _require_int(payload, "rpm")
    duty = _require_int(payload, "duty")
    if rpm < 0:
        raise DecodeError(f"rpm must not be negative, got {rpm}")
    if not 0 <= duty <= constants.DUTY_MAX:
        raise DecodeError(f"duty must be within 0-{constants.DUTY_MAX}, got {duty}")

    return TelemetryRecord(rpm=rpm, duty=duty)


def scale_pwm_to_percent(raw: int) -> int:
    """Convert a hwmon PWM value (0-255) into a duty percentage (0-100)."""

    clamped = max(0, min(constants.PWM_MAX, raw))
    return round(clamped / constants.PWM_MAX * constants.DUTY_MAX)


def encode_duty_command(percent: int) -> bytes:
    if not 0 <= percent <= constants.DUTY_MAX:
        raise ValueError(f"duty percent must be within 0-{constants.DUTY_MAX}, got {percent}")
    command = DutyCommand(set_duty=int(percent))
    return (json.dumps(asdict(command)) + "\n").encode("ascii")
