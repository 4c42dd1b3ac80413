from fakes import FakePeripheral

from gattscout.core.model import (
    CharacteristicInfo,
    DeviceReport,
    InspectionState,
    PhaseFault,
    ScanEvent,
    ScanEventKind,
    ServiceInfo,
)
from gattscout.core.report import render_device_report, render_scan_event, render_target_summary


def test_render_services_and_characteristics() -> None:
    report = DeviceReport(
        identifier="SHB1000",
        address="AA:00:00:00:00:01",
        state=InspectionState.DONE,
        services=(
            ServiceInfo(
                uuid="180d",
                characteristics=(
                    CharacteristicInfo(uuid="2a37", capabilities="notify"),
                    CharacteristicInfo(uuid="2a39", capabilities="write"),
                ),
            ),
        ),
    )

    assert render_device_report(report) == [
        "Device: SHB1000 [AA:00:00:00:00:01] - connected",
        "",
        "  Services and Characteristics:",
        "    Service: 180d",
        "      Characteristic: 2a37  [notify]",
        "      Characteristic: 2a39  [write]",
    ]


def test_render_no_services() -> None:
    report = DeviceReport("SHB1000", "AA:00:00:00:00:01", InspectionState.DONE, services=())
    assert render_device_report(report)[-1] == "    (no services found)"


def test_render_connect_error() -> None:
    report = DeviceReport(
        "SHB1000",
        "AA:00:00:00:00:01",
        InspectionState.ERROR,
        faults=(PhaseFault(InspectionState.CONNECTING, "link rejected"),),
    )
    assert render_device_report(report) == [
        "Device: SHB1000 [AA:00:00:00:00:01]",
        "  Error: link rejected",
    ]


def test_render_enumeration_and_disconnect_errors() -> None:
    report = DeviceReport(
        "SHB1000",
        "AA:00:00:00:00:01",
        InspectionState.DONE,
        faults=(
            PhaseFault(InspectionState.ENUMERATING, "GATT read timed out"),
            PhaseFault(InspectionState.DISCONNECTING, "already gone"),
        ),
    )
    lines = render_device_report(report)
    assert "    Error enumerating services: GATT read timed out" in lines
    assert lines[-1] == "  Error disconnecting: already gone"


def test_render_scan_progress() -> None:
    peripheral = FakePeripheral("SHB1000", "AA:00:00:00:00:01")
    assert render_scan_event(ScanEvent(ScanEventKind.STARTED), 20.0) == "Scanning for 20 seconds..."
    assert render_scan_event(ScanEvent(ScanEventKind.FOUND, peripheral), 20.0) == "Found: SHB1000 [AA:00:00:00:00:01]"
    assert render_scan_event(ScanEvent(ScanEventKind.STOPPED), 20.0) == "Scan complete."
    assert render_target_summary(2, "SHB1000") == "Found 2 SHB1000 device(s). Connecting to enumerate services..."
