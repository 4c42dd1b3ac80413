"""Radio adapter interfaces consumed by the core."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol


class Characteristic(Protocol):
    def uuid(self) -> str: ...

    def can_read(self) -> bool: ...

    def can_write_request(self) -> bool: ...

    def can_write_command(self) -> bool: ...

    def can_notify(self) -> bool: ...

    def can_indicate(self) -> bool: ...


class Service(Protocol):
    def uuid(self) -> str: ...

    def characteristics(self) -> Sequence[Characteristic]: ...


class Peripheral(Protocol):
    def identifier(self) -> str: ...

    def address(self) -> str: ...

    def is_connectable(self) -> bool: ...

    def connect(self) -> None:
        """Open a link; raises ConnectionFault on timeout, rejection, or wrong state."""

    def disconnect(self) -> None:
        """Close the link; raises ConnectionFault when no link exists or closing fails."""

    def services(self) -> Sequence[Service]:
        """Return the services of a connected peripheral."""


class Adapter(Protocol):
    def identifier(self) -> str: ...

    def on_scan_start(self, callback: Callable[[], None]) -> None: ...

    def on_device_found(self, callback: Callable[[Peripheral], None]) -> None: ...

    def on_scan_stop(self, callback: Callable[[], None]) -> None: ...

    def scan_for(self, duration_ms: int) -> None:
        """Scan for `duration_ms` and return once the period has elapsed."""

