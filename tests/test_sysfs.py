from pathlib import Path

import pytest

from vfan_bridge.adapters.sysfs import SysfsError, read_int, write_int


def test_read_int_strips_trailing_newline(tmp_path: Path):
    path = tmp_path / "pwm1"
    path.write_text("153\n", encoding="ascii")

    assert read_int(path) == 153


def test_read_int_missing_file_raises(tmp_path: Path):
    with pytest.raises(SysfsError):
        read_int(tmp_path / "pwm1")


def test_read_int_garbage_raises(tmp_path: Path):
    path = tmp_path / "pwm1"
    path.write_text("auto\n", encoding="ascii")

    with pytest.raises(SysfsError):
        read_int(path)


def test_write_int_writes_decimal_string(tmp_path: Path):
    path = tmp_path / "fan1_input"

    write_int(path, 1200)

    assert path.read_text(encoding="ascii") == "1200"


def test_write_int_missing_directory_raises(tmp_path: Path):
    with pytest.raises(SysfsError):
        write_int(tmp_path / "gone" / "fan1_input", 1200)
