"""Time-bounded discovery of connectable peripherals."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable

from gattscout.core.errors import ScanError
from gattscout.core.model import ScanEvent, ScanEventKind
from gattscout.transports.base import Adapter, Peripheral

LOGGER = logging.getLogger(__name__)


def collect(
    adapter: Adapter,
    scan_duration_s: float,
    *,
    on_event: Callable[[ScanEvent], None] | None = None,
) -> list[Peripheral]:
    """Scan for `scan_duration_s` and return connectable peripherals in first-seen order.

    Adapter callbacks may fire from a background context; they only enqueue
    events. Deduplication and ordering happen in the loop below, on the
    calling thread, while the scan itself runs on a worker thread.
    """
    events: queue.Queue[ScanEvent | None] = queue.Queue()
    adapter.on_scan_start(lambda: events.put(ScanEvent(ScanEventKind.STARTED)))
    adapter.on_device_found(lambda p: events.put(ScanEvent(ScanEventKind.FOUND, p)))
    adapter.on_scan_stop(lambda: events.put(ScanEvent(ScanEventKind.STOPPED)))

    failures: list[Exception] = []

    def _scan() -> None:
        try:
            adapter.scan_for(int(scan_duration_s * 1000))
        except Exception as exc:
            failures.append(exc)
        finally:
            events.put(None)

    worker = threading.Thread(target=_scan, name="gattscout-scan", daemon=True)
    worker.start()

    seen_addresses: set[str] = set()
    found: list[Peripheral] = []
    while True:
        event = events.get()
        if event is None:
            break

        if event.kind is ScanEventKind.FOUND:
            peripheral = event.peripheral
            if not peripheral.is_connectable():
                continue
            address = peripheral.address()
            if not address or address in seen_addresses:
                continue
            seen_addresses.add(address)
            found.append(peripheral)
            LOGGER.info("Found %s [%s]", peripheral.identifier(), address)
        else:
            LOGGER.info("Scan %s", event.kind.value)

        if on_event is not None:
            on_event(event)

    worker.join()
    if failures:
        raise ScanError(f"Scan failed: {failures[0]}") from failures[0]

    LOGGER.info("Discovered %d connectable peripheral(s)", len(found))
    return found
