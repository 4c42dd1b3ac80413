"""Service layer that runs one discover -> select -> inspect pass."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from gattscout.core.discovery import collect
from gattscout.core.errors import NoAdapterError, NoTargetsError
from gattscout.core.inspector import iter_inspections
from gattscout.core.model import AdapterConfig, DeviceReport, RunResult, RunSettings, ScanEvent
from gattscout.core.selector import select
from gattscout.transports.base import Adapter, Peripheral
from gattscout.transports.bleak_adapter import list_adapters

LOGGER = logging.getLogger(__name__)


class ScoutService:
    def __init__(
        self,
        *,
        adapter_lister: Callable[[AdapterConfig], Sequence[Adapter]] | None = None,
    ) -> None:
        self._list_adapters = adapter_lister or list_adapters

    def list_adapters(self, config: AdapterConfig | None = None) -> list[Adapter]:
        return list(self._list_adapters(config or AdapterConfig()))

    def acquire_adapter(self, config: AdapterConfig) -> Adapter:
        adapters = self.list_adapters(config)
        if not adapters:
            if config.name:
                raise NoAdapterError(f"Bluetooth adapter '{config.name}' not found.")
            raise NoAdapterError("No Bluetooth adapter found.")
        adapter = adapters[0]
        LOGGER.info("Using adapter %s", adapter.identifier())
        return adapter

    def find_targets(
        self,
        adapter: Adapter,
        settings: RunSettings,
        *,
        on_event: Callable[[ScanEvent], None] | None = None,
    ) -> tuple[list[Peripheral], list[Peripheral]]:
        discovered = collect(adapter, settings.scan_timeout_s, on_event=on_event)
        targets = select(discovered, settings.identifier, settings.match_mode)
        if not targets:
            raise NoTargetsError(f"No {settings.identifier} devices found.")
        return discovered, targets

    def run(
        self,
        settings: RunSettings,
        *,
        on_event: Callable[[ScanEvent], None] | None = None,
        on_targets: Callable[[list[Peripheral]], None] | None = None,
        on_report: Callable[[DeviceReport], None] | None = None,
    ) -> RunResult:
        adapter = self.acquire_adapter(settings.adapter)
        discovered, targets = self.find_targets(adapter, settings, on_event=on_event)
        if on_targets is not None:
            on_targets(targets)

        reports: list[DeviceReport] = []
        for report in iter_inspections(targets):
            if on_report is not None:
                on_report(report)
            reports.append(report)

        failed = sum(1 for r in reports if not r.ok)
        LOGGER.info("Inspected %d device(s), %d with errors", len(reports), failed)
        return RunResult(settings=settings, discovered=len(discovered), reports=tuple(reports))
