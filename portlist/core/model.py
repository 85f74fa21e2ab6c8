"""Core data models used across parser, matcher, catalog, service, and CLI."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class BusFamily(str, enum.Enum):
    UNKNOWN = "unknown"
    USB = "usb"
    PCI = "pci"
    BLUETOOTH = "bluetooth"


class MatchMode(enum.Enum):
    NONE = "none"
    ANY = "any"
    VENDOR_SET = "vendor"
    VENDOR_DEVICE_PAIR_SET = "vendor:device"


class Retrieved(enum.Flag):
    """Optional hardware identifier fields recovered by the parser."""

    NONE = 0
    VENDOR = enum.auto()
    PRODUCT = enum.auto()
    REVISION = enum.auto()
    SUBSYSTEM = enum.auto()
    INTERFACE = enum.auto()


class PortFamily(enum.Enum):
    ALL = "all"
    COM_ONLY = "com"
    LPT_ONLY = "lpt"


class DeviceProperty(enum.Enum):
    """String properties a device source can look up on demand."""

    DESCRIPTION = "description"
    MANUFACTURER = "manufacturer"
    DEVICE_CLASS = "device_class"
    LOCATION = "location"
    PHYSICAL_OBJECT = "physical_object"
    SERIAL_NUMBER = "serial_number"


@dataclass(frozen=True)
class HardwareIdentity:
    bus_family: BusFamily = BusFamily.UNKNOWN
    bus_label: str = ""
    vendor_id: int | None = None
    product_id: int | None = None
    revision: int | None = None
    subsystem_id: int | None = None
    usb_interface: int | None = None
    has_usb_identity: bool = False
    has_pci_identity: bool = False

    @property
    def retrieved(self) -> Retrieved:
        flags = Retrieved.NONE
        if self.vendor_id is not None:
            flags |= Retrieved.VENDOR
        if self.product_id is not None:
            flags |= Retrieved.PRODUCT
        if self.revision is not None:
            flags |= Retrieved.REVISION
        if self.subsystem_id is not None:
            flags |= Retrieved.SUBSYSTEM
        if self.usb_interface is not None:
            flags |= Retrieved.INTERFACE
        return flags

    @property
    def packed_id(self) -> int | None:
        """Vendor and product packed as ``vendor << 16 | product``."""
        if self.vendor_id is None or self.product_id is None:
            return None
        return (self.vendor_id << 16) | self.product_id


@dataclass(frozen=True)
class DeviceIdentity:
    port_name: str
    hardware: HardwareIdentity = field(default_factory=HardwareIdentity)
    description: str | None = None
    is_available: bool = False
    raw_hardware_id: str | None = None
    manufacturer: str | None = None
    device_class: str | None = None
    location: str | None = None
    physical_object: str | None = None
    serial_number: str | None = None
    # registry details for legacy ISA and multi-port boards
    port_address: int | None = None
    interrupt: int | None = None
    port_index: int | None = None
    indexed: bool | None = None


@dataclass(frozen=True)
class FilterRule:
    """A single parsed filter token such as ``usb``, ``pci=8086`` or ``usb=2341:0043``."""

    bus: BusFamily
    vendor_id: int | None = None
    device_id: int | None = None

    @property
    def mode(self) -> MatchMode:
        if self.vendor_id is None:
            return MatchMode.ANY
        if self.device_id is None:
            return MatchMode.VENDOR_SET
        return MatchMode.VENDOR_DEVICE_PAIR_SET


@dataclass(frozen=True)
class FilterSpecification:
    modes: dict[BusFamily, MatchMode] = field(default_factory=dict)
    vendor_sets: dict[BusFamily, frozenset[int]] = field(default_factory=dict)
    device_pair_sets: dict[BusFamily, frozenset[int]] = field(default_factory=dict)

    def mode_for(self, family: BusFamily) -> MatchMode:
        return self.modes.get(family, MatchMode.NONE)

    def vendors(self, family: BusFamily) -> frozenset[int]:
        return self.vendor_sets.get(family, frozenset())

    def pairs(self, family: BusFamily) -> frozenset[int]:
        return self.device_pair_sets.get(family, frozenset())

    @property
    def is_active(self) -> bool:
        return any(mode is not MatchMode.NONE for mode in self.modes.values())


@dataclass(frozen=True)
class ReportOptions:
    include_absent: bool = False
    long_form: bool = False
    verbose: bool = False
    exclude_available: bool = False
    port_family: PortFamily = PortFamily.ALL

    def __post_init__(self) -> None:
        # verbose implies long form, -x implies -a
        if self.verbose and not self.long_form:
            object.__setattr__(self, "long_form", True)
        if self.exclude_available and not self.include_absent:
            object.__setattr__(self, "include_absent", True)


@dataclass(frozen=True)
class Preset:
    id: str
    name: str
    rules: tuple[FilterRule, ...]
    tokens: tuple[str, ...]
    description: str | None = None


@dataclass(frozen=True)
class PortListResult:
    ports: tuple[DeviceIdentity, ...]
    matching: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def count(self) -> int:
        return len(self.ports)
