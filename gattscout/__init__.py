"""Discover BLE peripherals by advertised name and enumerate their GATT services."""

__version__ = "0.1.0"
