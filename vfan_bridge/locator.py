"""Endpoint discovery for the serial device and its hwmon counterpart.

Both endpoints appear asynchronously at boot: the microcontroller
enumerates on USB whenever it is plugged in, and the virtual fan driver
registers its hwmon directory when the module loads. Missing directories
are therefore normal and simply mean "not yet".

Usage:
    locator = EndpointLocator.from_config(config)
    pair = locator.locate()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from . import constants
from .core.models import EndpointPair

if TYPE_CHECKING:
    from .config import VFanConfig

LOGGER = logging.getLogger(__name__)


def _sorted_entries(directory: Path) -> List[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError:
        return []


class EndpointLocator:
    """Finds the fan's serial device and the matching hwmon directory."""

    def __init__(
        self,
        *,
        serial_dir: Path = constants.DEFAULT_SERIAL_DEVICE_DIR,
        serial_signatures: Sequence[str] = constants.DEFAULT_SERIAL_SIGNATURES,
        hwmon_root: Path = constants.DEFAULT_HWMON_ROOT,
        marker_path: str = constants.DEFAULT_MARKER_PATH,
        marker_signature: str = constants.DEFAULT_MARKER_SIGNATURE,
    ) -> None:
        self._serial_dir = Path(serial_dir)
        self._serial_signatures = tuple(sig for sig in serial_signatures if sig)
        self._hwmon_root = Path(hwmon_root)
        self._marker_path = marker_path
        self._marker_signature = marker_signature

    @classmethod
    def from_config(cls, config: VFanConfig) -> EndpointLocator:
        return cls(
            serial_dir=config.serial.device_dir,
            serial_signatures=config.serial.device_signatures,
            hwmon_root=config.hwmon.root,
            marker_path=config.hwmon.marker_path,
            marker_signature=config.hwmon.marker_signature,
        )

    def find_serial_device(self) -> Optional[Path]:
        """Return the first by-id entry whose name carries a device signature."""

        for entry in _sorted_entries(self._serial_dir):
            if self._matches_signature(entry.name, self._serial_signatures):
                LOGGER.debug("Serial device candidate %s", entry)
                return entry
        return None

    def find_hwmon_directory(self) -> Optional[Path]:
        """Return the first hwmonN directory whose marker holds the signature."""

        for entry in _sorted_entries(self._hwmon_root):
            if not entry.name.startswith("hwmon"):
                continue
            marker = entry / self._marker_path
            try:
                content = marker.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            if self._marker_signature in content:
                LOGGER.debug("hwmon directory candidate %s", entry)
                return entry
        return None

    def locate(self) -> Optional[EndpointPair]:
        """Resolve both endpoints, or return ``None`` if either is missing."""

        device_path = self.find_serial_device()
        if device_path is None:
            LOGGER.debug(
                "No serial device matching %s under %s",
                ", ".join(self._serial_signatures),
                self._serial_dir,
            )
            return None

        hwmon_directory = self.find_hwmon_directory()
        if hwmon_directory is None:
            LOGGER.debug(
                "No hwmon directory with marker %r under %s",
                self._marker_signature,
                self._hwmon_root,
            )
            return None

        return EndpointPair(device_path=device_path, hwmon_directory=hwmon_directory)

    @staticmethod
    def _matches_signature(name: str, signatures: Iterable[str]) -> bool:
        return any(signature in name for signature in signatures)
