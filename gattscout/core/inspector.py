"""Sequential connect/enumerate/disconnect inspection of target peripherals."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from gattscout.core.model import (
    CharacteristicInfo,
    DeviceReport,
    InspectionState,
    PhaseFault,
    ServiceInfo,
    StepResult,
)
from gattscout.transports.base import Characteristic, Peripheral

LOGGER = logging.getLogger(__name__)

_CAPABILITIES = (
    ("can_read", "read"),
    ("can_write_request", "write"),
    ("can_write_command", "write_no_resp"),
    ("can_notify", "notify"),
    ("can_indicate", "indicate"),
)
NO_CAPABILITIES = "none"


def capabilities_label(characteristic: Characteristic) -> str:
    labels = [label for predicate, label in _CAPABILITIES if getattr(characteristic, predicate)()]
    return " ".join(labels) if labels else NO_CAPABILITIES


def _attempt(call: Callable[[], Any]) -> StepResult:
    try:
        return StepResult(ok=True, value=call())
    except Exception as exc:
        LOGGER.debug("Adapter call failed", exc_info=True)
        return StepResult(ok=False, error=str(exc) or type(exc).__name__)


def _enumerate(peripheral: Peripheral) -> tuple[ServiceInfo, ...]:
    services: list[ServiceInfo] = []
    for service in peripheral.services():
        characteristics = tuple(
            CharacteristicInfo(uuid=chr_.uuid(), capabilities=capabilities_label(chr_))
            for chr_ in service.characteristics()
        )
        services.append(ServiceInfo(uuid=service.uuid(), characteristics=characteristics))
    return tuple(services)


class _Inspection:
    def __init__(self, peripheral: Peripheral) -> None:
        self.peripheral = peripheral
        self.identifier = peripheral.identifier()
        self.address = peripheral.address()
        self.state = InspectionState.IDLE
        self.faults: list[PhaseFault] = []

    def enter(self, state: InspectionState) -> None:
        LOGGER.debug("%s [%s]: %s -> %s", self.identifier, self.address, self.state.value, state.value)
        self.state = state

    def fail(self, error: str | None) -> None:
        message = error or "unknown error"
        LOGGER.warning("%s [%s] failed while %s: %s", self.identifier, self.address, self.state.value, message)
        self.faults.append(PhaseFault(phase=self.state, message=message))

    def report(self, services: tuple[ServiceInfo, ...] | None = None) -> DeviceReport:
        return DeviceReport(
            identifier=self.identifier,
            address=self.address,
            state=self.state,
            services=services,
            faults=tuple(self.faults),
        )


def inspect_device(peripheral: Peripheral) -> DeviceReport:
    """Run one connect -> enumerate -> disconnect cycle and report its outcome.

    Never raises for adapter faults. A failed connect ends in ERROR with no
    disconnect; once connected, disconnect is always issued exactly once.
    """
    inspection = _Inspection(peripheral)

    inspection.enter(InspectionState.CONNECTING)
    connected = _attempt(peripheral.connect)
    if not connected.ok:
        inspection.fail(connected.error)
        inspection.enter(InspectionState.ERROR)
        return inspection.report()
    inspection.enter(InspectionState.CONNECTED)

    inspection.enter(InspectionState.ENUMERATING)
    enumerated = _attempt(lambda: _enumerate(peripheral))
    services: tuple[ServiceInfo, ...] | None = None
    if enumerated.ok:
        services = enumerated.value
        if not services:
            LOGGER.info("%s [%s]: no services found", inspection.identifier, inspection.address)
    else:
        inspection.fail(enumerated.error)
        inspection.enter(InspectionState.ERROR)

    inspection.enter(InspectionState.DISCONNECTING)
    disconnected = _attempt(peripheral.disconnect)
    if not disconnected.ok:
        inspection.fail(disconnected.error)

    inspection.enter(InspectionState.DONE)
    return inspection.report(services)


def iter_inspections(targets: Iterable[Peripheral]) -> Iterator[DeviceReport]:
    for peripheral in targets:
        yield inspect_device(peripheral)
