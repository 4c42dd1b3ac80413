from __future__ import annotations

from pathlib import Path

import pytest
from fakes import FakeAdapter, FakeCharacteristic, FakePeripheral, FakeService
from typer.testing import CliRunner

from gattscout import cli
from gattscout.core.errors import ConnectionFault
from gattscout.core.service import ScoutService

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))


def _use_adapters(monkeypatch: pytest.MonkeyPatch, *adapters: FakeAdapter) -> None:
    monkeypatch.setattr(cli, "ScoutService", lambda: ScoutService(adapter_lister=lambda config: list(adapters)))


def test_scan_command_reports_services(monkeypatch: pytest.MonkeyPatch) -> None:
    adapter = FakeAdapter(
        [
            FakePeripheral(
                "SHB1000",
                "AA:00:00:00:00:01",
                services=[FakeService("180f", [FakeCharacteristic("2a19", "read", "notify")])],
            ),
            FakePeripheral("Other", "AA:00:00:00:00:02"),
        ]
    )
    _use_adapters(monkeypatch, adapter)

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 0
    assert "Scanning for 20 seconds..." in result.output
    assert "Found: Other [AA:00:00:00:00:02]" in result.output
    assert "Found 1 SHB1000 device(s)" in result.output
    assert "Device: SHB1000 [AA:00:00:00:00:01] - connected" in result.output
    assert "      Characteristic: 2a19  [read notify]" in result.output
    assert adapter.scans == [20000]


def test_scan_command_device_errors_keep_success_status(monkeypatch: pytest.MonkeyPatch) -> None:
    adapter = FakeAdapter(
        [
            FakePeripheral("SHB1000", "AA:00:00:00:00:01", connect_error=ConnectionFault("rejected")),
            FakePeripheral("SHB1000", "AA:00:00:00:00:02"),
        ]
    )
    _use_adapters(monkeypatch, adapter)

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 0
    assert "  Error: rejected" in result.output
    assert "(no services found)" in result.output


def test_scan_command_without_targets_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_adapters(monkeypatch, FakeAdapter([FakePeripheral("Other", "AA:00:00:00:00:02")]))

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 1
    assert "Error: No SHB1000 devices found." in result.output
    assert "Traceback" not in result.output


def test_scan_command_without_adapter_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_adapters(monkeypatch)

    result = runner.invoke(cli.app, ["scan"])

    assert result.exit_code == 1
    assert "Error: No Bluetooth adapter found." in result.output
    assert "Scanning" not in result.output


def test_scan_command_options_override_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    adapter = FakeAdapter([FakePeripheral("g1000-left", "AA:00:00:00:00:03")])
    _use_adapters(monkeypatch, adapter)

    result = runner.invoke(
        cli.app,
        ["scan", "--identifier", "G1000", "--match", "prefix", "--timeout", "1.5"],
    )
    assert result.exit_code == 1
    assert "No G1000 devices found" in result.output

    result = runner.invoke(
        cli.app,
        ["scan", "--identifier", "g1000", "--match", "prefix", "--timeout", "1.5"],
    )
    assert result.exit_code == 0
    assert "Scanning for 1.5 seconds..." in result.output
    assert adapter.scans == [1500, 1500]


def test_invalid_settings_file_is_clean_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_adapters(monkeypatch, FakeAdapter())
    settings = tmp_path / "settings.yaml"
    settings.write_text("match: fuzzy\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["scan", "--config", str(settings)])

    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.output


def test_adapters_command(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_adapters(monkeypatch, FakeAdapter(name="hci0"), FakeAdapter(name="hci1"))

    result = runner.invoke(cli.app, ["adapters"])

    assert result.exit_code == 0
    assert result.output.split() == ["hci0", "hci1"]
