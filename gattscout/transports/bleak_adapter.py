"""BLE adapter implementation using bleak."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import Callable, Coroutine, Mapping
from pathlib import Path
from typing import Any, TypeVar

from gattscout.core.errors import ConnectionFault, EnumerationError, ScanError
from gattscout.core.model import AdapterConfig

LOGGER = logging.getLogger(__name__)

_SYSFS_BLUETOOTH = Path("/sys/class/bluetooth")
# BluetoothLEAdvertisementType.CONNECTABLE_UNDIRECTED / CONNECTABLE_DIRECTED
_WINRT_CONNECTABLE_TYPES = frozenset({0, 1})

_T = TypeVar("_T")


class _LoopThread:
    """Private asyncio loop on a daemon thread; bleak objects stay bound to it."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock = threading.Lock()

    def run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        return asyncio.run_coroutine_threadsafe(coro, self._ensure_loop()).result()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name=self._name, daemon=True)
                thread.start()
                self._loop = loop
            return self._loop


def _advertised_connectable(advertisement_data: Any) -> bool:
    for item in getattr(advertisement_data, "platform_data", None) or ():
        if isinstance(item, Mapping) and "kCBAdvDataIsConnectable" in item:
            return bool(item["kCBAdvDataIsConnectable"])
        received = getattr(item, "adv", item)
        advertisement_type = getattr(received, "advertisement_type", None)
        if advertisement_type is not None:
            return int(advertisement_type) in _WINRT_CONNECTABLE_TYPES
    # BlueZ does not expose the advertising PDU type.
    return True


class BleakCharacteristic:
    def __init__(self, characteristic: Any) -> None:
        self._uuid = str(characteristic.uuid)
        self._properties = frozenset(characteristic.properties)

    def uuid(self) -> str:
        return self._uuid

    def can_read(self) -> bool:
        return "read" in self._properties

    def can_write_request(self) -> bool:
        return "write" in self._properties

    def can_write_command(self) -> bool:
        return "write-without-response" in self._properties

    def can_notify(self) -> bool:
        return "notify" in self._properties

    def can_indicate(self) -> bool:
        return "indicate" in self._properties


class BleakService:
    def __init__(self, service: Any) -> None:
        self._uuid = str(service.uuid)
        self._characteristics = [BleakCharacteristic(c) for c in service.characteristics]

    def uuid(self) -> str:
        return self._uuid

    def characteristics(self) -> list[BleakCharacteristic]:
        return list(self._characteristics)


class BleakPeripheral:
    def __init__(self, adapter: BleakAdapter, device: Any, advertisement_data: Any = None) -> None:
        self._adapter = adapter
        self._device = device
        self._identifier = device.name or getattr(advertisement_data, "local_name", None) or ""
        self._address = device.address or ""
        self._connectable = _advertised_connectable(advertisement_data)
        self._client: Any = None

    def identifier(self) -> str:
        return self._identifier

    def address(self) -> str:
        return self._address

    def is_connectable(self) -> bool:
        return self._connectable

    def connect(self) -> None:
        try:
            from bleak import BleakClient  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise ConnectionFault(
                "BLE support requires 'bleak'. Install dependency and retry."
            ) from exc

        if self._client is not None:
            raise ConnectionFault(f"BLE peripheral {self._address} is already connected")

        client = BleakClient(self._device, **self._adapter.client_kwargs())
        try:
            self._adapter.run(client.connect())
        except Exception as exc:
            raise ConnectionFault(f"BLE connect failed for {self._address}: {exc}") from exc
        if not client.is_connected:
            try:
                self._adapter.run(client.disconnect())
            except Exception:
                LOGGER.debug("Cleanup disconnect failed for %s", self._address, exc_info=True)
            raise ConnectionFault(f"BLE connect failed for {self._address}")
        self._client = client

    def disconnect(self) -> None:
        client, self._client = self._client, None
        if client is None:
            raise ConnectionFault(f"BLE peripheral {self._address} is not connected")
        try:
            self._adapter.run(client.disconnect())
        except Exception as exc:
            raise ConnectionFault(f"BLE disconnect failed for {self._address}: {exc}") from exc

    def services(self) -> list[BleakService]:
        if self._client is None:
            raise EnumerationError(f"BLE peripheral {self._address} is not connected")
        try:
            return [BleakService(service) for service in self._client.services]
        except Exception as exc:
            raise EnumerationError(
                f"Reading GATT services failed for {self._address}: {exc}"
            ) from exc


class BleakAdapter:
    def __init__(self, name: str | None = None, config: AdapterConfig | None = None) -> None:
        self._name = name
        self.config = config or AdapterConfig()
        self._loop = _LoopThread(f"gattscout-{self.identifier()}")
        self._on_start: Callable[[], None] | None = None
        self._on_found: Callable[[BleakPeripheral], None] | None = None
        self._on_stop: Callable[[], None] | None = None

    def identifier(self) -> str:
        return self._name or "default"

    def on_scan_start(self, callback: Callable[[], None]) -> None:
        self._on_start = callback

    def on_device_found(self, callback: Callable[[BleakPeripheral], None]) -> None:
        self._on_found = callback

    def on_scan_stop(self, callback: Callable[[], None]) -> None:
        self._on_stop = callback

    def run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        return self._loop.run(coro)

    def scanner_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"scanning_mode": self.config.scanning_mode}
        if self._name is not None:
            kwargs["adapter"] = self._name
        if sys.platform == "darwin":
            kwargs["cb"] = {"use_bdaddr": self.config.use_bdaddr}
        return kwargs

    def client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"timeout": self.config.connect_timeout_s}
        if self._name is not None:
            kwargs["adapter"] = self._name
        return kwargs

    def scan_for(self, duration_ms: int) -> None:
        try:
            from bleak import BleakScanner  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise ScanError("BLE support requires 'bleak'. Install dependency and retry.") from exc

        def _detected(device: Any, advertisement_data: Any) -> None:
            if self._on_found is not None:
                self._on_found(BleakPeripheral(self, device, advertisement_data))

        async def _scan() -> None:
            scanner = BleakScanner(detection_callback=_detected, **self.scanner_kwargs())
            if self._on_start is not None:
                self._on_start()
            await scanner.start()
            try:
                await asyncio.sleep(duration_ms / 1000)
            finally:
                await scanner.stop()
            if self._on_stop is not None:
                self._on_stop()

        LOGGER.debug("Scanning on adapter %s for %d ms", self.identifier(), duration_ms)
        try:
            self.run(_scan())
        except Exception as exc:
            raise ScanError(f"BLE scan failed on adapter {self.identifier()}: {exc}") from exc


def _bluez_controllers() -> list[str]:
    try:
        entries = list(_SYSFS_BLUETOOTH.iterdir())
    except OSError:
        return []
    # hciN:handle entries are live connections, not controllers.
    return sorted(e.name for e in entries if e.name.startswith("hci") and ":" not in e.name)


def list_adapters(config: AdapterConfig | None = None) -> list[BleakAdapter]:
    config = config or AdapterConfig()
    if not sys.platform.startswith("linux"):
        return [BleakAdapter(config.name, config)]

    names = _bluez_controllers()
    if config.name is not None:
        names = [name for name in names if name == config.name]
    return [BleakAdapter(name, config) for name in names]
