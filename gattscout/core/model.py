"""Core data models used across discovery, inspection, and reporting."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

DEFAULT_IDENTIFIER = "SHB1000"
DEFAULT_SCAN_TIMEOUT_S = 20.0


class MatchMode(str, enum.Enum):
    EXACT = "exact"
    CASEFOLD = "casefold"
    PREFIX = "prefix"


class ScanEventKind(str, enum.Enum):
    STARTED = "started"
    FOUND = "found"
    STOPPED = "stopped"


class InspectionState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ENUMERATING = "enumerating"
    DISCONNECTING = "disconnecting"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class AdapterConfig:
    """Platform toggles applied when an adapter is acquired."""

    name: str | None = None
    scanning_mode: str = "active"
    use_bdaddr: bool = False
    connect_timeout_s: float = 10.0


@dataclass(frozen=True)
class RunSettings:
    identifier: str = DEFAULT_IDENTIFIER
    scan_timeout_s: float = DEFAULT_SCAN_TIMEOUT_S
    match_mode: MatchMode = MatchMode.EXACT
    adapter: AdapterConfig = field(default_factory=AdapterConfig)


@dataclass(frozen=True)
class ScanEvent:
    kind: ScanEventKind
    peripheral: Any = None


@dataclass(frozen=True)
class CharacteristicInfo:
    uuid: str
    capabilities: str


@dataclass(frozen=True)
class ServiceInfo:
    uuid: str
    characteristics: tuple[CharacteristicInfo, ...]


@dataclass(frozen=True)
class StepResult:
    """Outcome of one guarded adapter call."""

    ok: bool
    value: Any = None
    error: str | None = None


@dataclass(frozen=True)
class PhaseFault:
    phase: InspectionState
    message: str


@dataclass(frozen=True)
class DeviceReport:
    identifier: str
    address: str
    state: InspectionState
    services: tuple[ServiceInfo, ...] | None = None
    faults: tuple[PhaseFault, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.faults

    def fault_for(self, phase: InspectionState) -> PhaseFault | None:
        for fault in self.faults:
            if fault.phase is phase:
                return fault
        return None


@dataclass(frozen=True)
class RunResult:
    settings: RunSettings
    discovered: int
    reports: tuple[DeviceReport, ...]
