"""Configuration loader for vfan-bridge."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from . import constants


@dataclass(slots=True)
class SerialConfig:
    device_dir: Path = constants.DEFAULT_SERIAL_DEVICE_DIR
    device_signatures: List[str] = field(
        default_factory=lambda: list(constants.DEFAULT_SERIAL_SIGNATURES)
    )
    baudrate: int = constants.DEFAULT_BAUDRATE
    read_timeout_seconds: float = 30.0  # 0 disables the read deadline


@dataclass(slots=True)
class HwmonConfig:
    root: Path = constants.DEFAULT_HWMON_ROOT
    marker_path: str = constants.DEFAULT_MARKER_PATH
    marker_signature: str = constants.DEFAULT_MARKER_SIGNATURE
    pwm_file: str = constants.DEFAULT_PWM_FILE
    rpm_file: str = constants.DEFAULT_RPM_FILE


@dataclass(slots=True)
class BridgeConfig:
    search_interval_seconds: float = 3.0
    cooldown_seconds: float = 2.0
    duty_poll_interval_seconds: float = 0.2


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    verbose_libraries: bool = False


@dataclass(slots=True)
class HealthConfig:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 0


@dataclass(slots=True)
class VFanConfig:
    serial: SerialConfig
    hwmon: HwmonConfig
    bridge: BridgeConfig
    logging: LoggingConfig
    health: HealthConfig
    raw: ConfigParser
    path: Path


def _parse_list(value: str, *, default: Iterable[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_path(value: str) -> Optional[Path]:
    value = value.strip()
    if not value:
        return None
    return Path(value).expanduser()


def load_config(path: Optional[Path] = None) -> VFanConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "serial": {
                "device_dir": str(constants.DEFAULT_SERIAL_DEVICE_DIR),
                "device_signatures": ",".join(constants.DEFAULT_SERIAL_SIGNATURES),
                "baudrate": str(constants.DEFAULT_BAUDRATE),
                "read_timeout_seconds": "30",
            },
            "hwmon": {
                "root": str(constants.DEFAULT_HWMON_ROOT),
                "marker_path": constants.DEFAULT_MARKER_PATH,
                "marker_signature": constants.DEFAULT_MARKER_SIGNATURE,
                "pwm_file": constants.DEFAULT_PWM_FILE,
                "rpm_file": constants.DEFAULT_RPM_FILE,
            },
            "bridge": {
                "search_interval_seconds": "3",
                "cooldown_seconds": "2",
                "duty_poll_interval_seconds": "0.2",
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "verbose_libraries": "false",
            },
            "health": {
                "enabled": "false",
                "host": "127.0.0.1",
                "port": "0",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    serial_defaults = SerialConfig()
    serial = SerialConfig(
        device_dir=Path(parser.get("serial", "device_dir")).expanduser(),
        device_signatures=_parse_list(
            parser.get("serial", "device_signatures", fallback=""),
            default=constants.DEFAULT_SERIAL_SIGNATURES,
        ),
        baudrate=max(
            1,
            parser.getint("serial", "baudrate", fallback=serial_defaults.baudrate),
        ),
        read_timeout_seconds=max(
            0.0,
            parser.getfloat(
                "serial",
                "read_timeout_seconds",
                fallback=serial_defaults.read_timeout_seconds,
            ),
        ),
    )

    hwmon = HwmonConfig(
        root=Path(parser.get("hwmon", "root")).expanduser(),
        marker_path=parser.get("hwmon", "marker_path"),
        marker_signature=parser.get("hwmon", "marker_signature"),
        pwm_file=parser.get("hwmon", "pwm_file"),
        rpm_file=parser.get("hwmon", "rpm_file"),
    )

    bridge_defaults = BridgeConfig()
    bridge = BridgeConfig(
        search_interval_seconds=max(
            0.1,
            parser.getfloat(
                "bridge",
                "search_interval_seconds",
                fallback=bridge_defaults.search_interval_seconds,
            ),
        ),
        cooldown_seconds=max(
            0.0,
            parser.getfloat(
                "bridge", "cooldown_seconds", fallback=bridge_defaults.cooldown_seconds
            ),
        ),
        duty_poll_interval_seconds=max(
            0.01,
            parser.getfloat(
                "bridge",
                "duty_poll_interval_seconds",
                fallback=bridge_defaults.duty_poll_interval_seconds,
            ),
        ),
    )

    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=_optional_path(parser.get("logging", "path", fallback="")),
        verbose_libraries=parser.getboolean(
            "logging", "verbose_libraries", fallback=False
        ),
    )

    health = HealthConfig(
        enabled=parser.getboolean("health", "enabled", fallback=False),
        host=parser.get("health", "host", fallback="127.0.0.1"),
        port=parser.getint("health", "port", fallback=0),
    )

    return VFanConfig(
        serial=serial,
        hwmon=hwmon,
        bridge=bridge,
        logging=logging_config,
        health=health,
        raw=parser,
        path=config_path,
    )
