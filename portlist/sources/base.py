"""Device source interfaces."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from portlist.core.model import DeviceProperty

# setup classes holding serial and parallel ports
PORTS_CLASS = "Ports"
MODEM_CLASS = "Modem"
MULTIPORT_SERIAL_CLASS = "MultiportSerial"
DEVICE_CLASSES = (PORTS_CLASS, MODEM_CLASS, MULTIPORT_SERIAL_CLASS)


class RawDeviceRecord(Protocol):
    port_name: str | None

    def is_available(self) -> bool:
        """Whether the device currently has a live physical device object."""

    def hardware_id(self) -> str | None:
        """Primary hardware identifier string, e.g. ``USB\\VID_0403&PID_6001``."""

    def lookup(self, prop: DeviceProperty) -> str | None:
        """Fetch a descriptive string property; called only when needed."""

    def registry_value(self, name: str) -> int | None:
        """Read a DWORD from the device's port settings (PortAddress, Interrupt, ...)."""


class DeviceSource(Protocol):
    def records(
        self,
        *,
        include_absent: bool = False,
        device_classes: tuple[str, ...] = DEVICE_CLASSES,
    ) -> Iterable[RawDeviceRecord]:
        """Yield one record per port device in the requested setup classes."""


@dataclass(frozen=True)
class StaticRecord:
    """Record whose properties were all captured up front."""

    port_name: str | None
    available: bool = True
    hardware: str | None = None
    properties: dict[DeviceProperty, str] = field(default_factory=dict)
    registry: dict[str, int] = field(default_factory=dict)

    def is_available(self) -> bool:
        return self.available

    def hardware_id(self) -> str | None:
        return self.hardware

    def lookup(self, prop: DeviceProperty) -> str | None:
        return self.properties.get(prop)

    def registry_value(self, name: str) -> int | None:
        return self.registry.get(name)
