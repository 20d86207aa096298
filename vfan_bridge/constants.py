"""Constants used across the vfan-bridge package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "vfan-bridge"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path("/etc") / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_SERIAL_DEVICE_DIR = Path("/dev/serial/by-id")
DEFAULT_SERIAL_SIGNATURES = ("Pico", "Raspberry_Pi")
DEFAULT_BAUDRATE = 115200

DEFAULT_HWMON_ROOT = Path("/sys/class/hwmon")
DEFAULT_MARKER_PATH = "device/marker"
DEFAULT_MARKER_SIGNATURE = "vFanByTk"
DEFAULT_PWM_FILE = "pwm1"
DEFAULT_RPM_FILE = "fan1_input"

PWM_MAX = 255
DUTY_MAX = 100
