"""Device-to-filter matching logic.

Each bus family registers one rule. A family without a registered rule, or
whose mode is NONE in the filter, never matches.
"""

from __future__ import annotations

from collections.abc import Callable

from portlist.core.model import (
    BusFamily,
    DeviceIdentity,
    FilterSpecification,
    HardwareIdentity,
    MatchMode,
)

MatchRule = Callable[[HardwareIdentity, MatchMode, FilterSpecification], bool]

_RULES: dict[BusFamily, MatchRule] = {}


def match_rule(family: BusFamily) -> Callable[[MatchRule], MatchRule]:
    def register(rule: MatchRule) -> MatchRule:
        _RULES[family] = rule
        return rule

    return register


@match_rule(BusFamily.USB)
def _usb_match(hardware: HardwareIdentity, mode: MatchMode, spec: FilterSpecification) -> bool:
    if mode is MatchMode.ANY:
        return True
    if not hardware.has_usb_identity:
        return False
    vendors = spec.vendors(BusFamily.USB)
    if mode is MatchMode.VENDOR_SET:
        return hardware.vendor_id in vendors
    if mode is MatchMode.VENDOR_DEVICE_PAIR_SET:
        return hardware.packed_id in spec.pairs(BusFamily.USB) or hardware.vendor_id in vendors
    return False


@match_rule(BusFamily.PCI)
def _pci_match(hardware: HardwareIdentity, mode: MatchMode, spec: FilterSpecification) -> bool:
    if mode is MatchMode.ANY:
        return True
    if not hardware.has_pci_identity or hardware.subsystem_id is None:
        return False

    vendors = spec.vendors(BusFamily.PCI)
    subsystem_vendor = hardware.subsystem_id >> 16

    def vendor_hit() -> bool:
        if hardware.vendor_id in vendors:
            return True
        # card-on-card: the subsystem vendor builds around another vendor's controller
        return subsystem_vendor != hardware.vendor_id and subsystem_vendor in vendors

    if mode is MatchMode.VENDOR_SET:
        return vendor_hit()
    if mode is MatchMode.VENDOR_DEVICE_PAIR_SET:
        pairs = spec.pairs(BusFamily.PCI)
        packed = hardware.packed_id
        if packed in pairs:
            return True
        if hardware.subsystem_id != packed and hardware.subsystem_id in pairs:
            return True
        return bool(vendors) and vendor_hit()
    return False


@match_rule(BusFamily.BLUETOOTH)
def _bluetooth_match(hardware: HardwareIdentity, mode: MatchMode, spec: FilterSpecification) -> bool:
    return mode is MatchMode.ANY


def matches(identity: DeviceIdentity, spec: FilterSpecification) -> bool:
    family = identity.hardware.bus_family
    rule = _RULES.get(family)
    if rule is None:
        return False
    mode = spec.mode_for(family)
    if mode is MatchMode.NONE:
        return False
    return rule(identity.hardware, mode, spec)
