"""Human-readable rendering of scan progress and inspection results."""

from __future__ import annotations

from gattscout.core.model import DeviceReport, InspectionState, ScanEvent, ScanEventKind


def _seconds(value: float) -> str:
    return f"{value:g}"


def render_scan_event(event: ScanEvent, scan_duration_s: float) -> str:
    if event.kind is ScanEventKind.STARTED:
        return f"Scanning for {_seconds(scan_duration_s)} seconds..."
    if event.kind is ScanEventKind.STOPPED:
        return "Scan complete."
    peripheral = event.peripheral
    return f"Found: {peripheral.identifier()} [{peripheral.address()}]"


def render_target_summary(count: int, identifier: str) -> str:
    return f"Found {count} {identifier} device(s). Connecting to enumerate services..."


def render_device_report(report: DeviceReport) -> list[str]:
    header = f"Device: {report.identifier} [{report.address}]"
    connect_fault = report.fault_for(InspectionState.CONNECTING)
    if connect_fault is not None:
        return [header, f"  Error: {connect_fault.message}"]

    lines = [f"{header} - connected", "", "  Services and Characteristics:"]
    enumerate_fault = report.fault_for(InspectionState.ENUMERATING)
    if enumerate_fault is not None:
        lines.append(f"    Error enumerating services: {enumerate_fault.message}")
    elif not report.services:
        lines.append("    (no services found)")
    else:
        for service in report.services:
            lines.append(f"    Service: {service.uuid}")
            for characteristic in service.characteristics:
                lines.append(
                    f"      Characteristic: {characteristic.uuid}  [{characteristic.capabilities}]"
                )

    disconnect_fault = report.fault_for(InspectionState.DISCONNECTING)
    if disconnect_fault is not None:
        lines.append(f"  Error disconnecting: {disconnect_fault.message}")
    return lines
