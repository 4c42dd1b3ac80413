"""Domain-specific errors for gattscout."""


class GattscoutError(Exception):
    """Base error for gattscout."""


class SettingsLoadError(GattscoutError):
    """Raised when a settings file cannot be read."""


class SettingsValidationError(GattscoutError):
    """Raised when a settings file does not conform to schema or semantics."""


class NoAdapterError(GattscoutError):
    """Raised when no local Bluetooth adapter is available."""


class NoTargetsError(GattscoutError):
    """Raised when discovery produced no peripheral matching the identifier."""


class AdapterError(GattscoutError):
    """Base radio adapter error."""


class ScanError(AdapterError):
    """Raised when the adapter fails to run a scan."""


class PeripheralError(AdapterError):
    """Base error for operations on one peripheral."""


class ConnectionFault(PeripheralError):
    """Raised on connect/disconnect failures (timeout, rejection, wrong state)."""


class EnumerationError(PeripheralError):
    """Raised when services or characteristics cannot be read."""
