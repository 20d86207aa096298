"""Integer access to hwmon pseudo-files."""

from __future__ import annotations

from pathlib import Path


class SysfsError(OSError):
    """Raised when a hwmon attribute cannot be read or written."""


def read_int(path: Path) -> int:
    try:
        content = path.read_text(encoding="ascii")
    except (OSError, UnicodeDecodeError) as exc:
        raise SysfsError(f"cannot read {path}: {exc}") from exc

    try:
        return int(content.strip())
    except ValueError as exc:
        raise SysfsError(f"{path} does not hold an integer: {content.strip()!r}") from exc


def write_int(path: Path, value: int) -> None:
    try:
        path.write_text(str(int(value)), encoding="ascii")
    except OSError as exc:
        raise SysfsError(f"cannot write {path}: {exc}") from exc
