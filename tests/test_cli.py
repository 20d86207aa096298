from pathlib import Path

from vfan_bridge import cli


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "vfan-bridge.cfg"
    config_path.write_text(
        f"""
[serial]
device_dir = {tmp_path / "by-id"}

[hwmon]
root = {tmp_path / "hwmon"}
""",
        encoding="utf-8",
    )
    return config_path


def test_show_config_prints_sections(tmp_path, capsys):
    config_path = _write_config(tmp_path)

    assert cli.main(["-c", str(config_path), "show-config"]) == 0

    output = capsys.readouterr().out
    assert f"Configuration loaded from {config_path}" in output
    assert "[serial]" in output
    assert "marker_signature = vFanByTk" in output


def test_locate_reports_missing_endpoints(tmp_path, capsys):
    config_path = _write_config(tmp_path)

    assert cli.main(["-c", str(config_path), "locate"]) == 1

    output = capsys.readouterr().out
    assert "serial device: not found" in output
    assert "hwmon directory: not found" in output


def test_locate_reports_found_endpoints(tmp_path, capsys, hwmon_dir):
    config_path = _write_config(tmp_path)
    (tmp_path / "by-id").mkdir()
    (tmp_path / "by-id" / "usb-Raspberry_Pi_Pico_abc").touch()
    directory = hwmon_dir("hwmon3")

    assert cli.main(["-c", str(config_path), "locate"]) == 0

    output = capsys.readouterr().out
    assert "usb-Raspberry_Pi_Pico_abc" in output
    assert str(directory) in output


def test_start_runs_application(tmp_path, monkeypatch):
    config_path = _write_config(tmp_path)
    started = []
    monkeypatch.setattr(cli.VFanBridgeApp, "start", classmethod(lambda cls, config: started.append(config)))

    assert cli.main(["-c", str(config_path), "start"]) == 0

    assert started[0].path == config_path
