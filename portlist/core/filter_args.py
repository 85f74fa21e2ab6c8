"""Translation of user filter tokens into a FilterSpecification."""

from __future__ import annotations

import re
from collections.abc import Iterable

from portlist.core.errors import FilterSyntaxError
from portlist.core.model import BusFamily, FilterRule, FilterSpecification, MatchMode

_ID_RE = re.compile(r"^(?:0x)?([0-9a-f]{1,4})$", re.IGNORECASE)
_BUS_ALIASES = {
    "usb": BusFamily.USB,
    "pci": BusFamily.PCI,
    "bt": BusFamily.BLUETOOTH,
    "bluetooth": BusFamily.BLUETOOTH,
    "bthenum": BusFamily.BLUETOOTH,
}
# families that carry vendor/device identifiers
_IDENTIFIED_BUSES = frozenset({BusFamily.USB, BusFamily.PCI})

# a family's mode is the broadest of its rules
_MODE_RANK = {
    MatchMode.NONE: 0,
    MatchMode.VENDOR_SET: 1,
    MatchMode.VENDOR_DEVICE_PAIR_SET: 2,
    MatchMode.ANY: 3,
}


def parse_hex_id(text: str, *, context: str) -> int:
    match = _ID_RE.match(text.strip())
    if not match:
        raise FilterSyntaxError(f"{context}: '{text}' is not a 1-4 digit hex id")
    return int(match.group(1), 16)


def parse_vendor_device(text: str, *, context: str) -> tuple[int, int]:
    vendor, sep, device = text.partition(":")
    if not sep:
        raise FilterSyntaxError(f"{context}: '{text}' must be <vendor>:<device> in hex")
    return parse_hex_id(vendor, context=context), parse_hex_id(device, context=context)


def parse_filter_token(token: str) -> FilterRule:
    """Parse ``bus``, ``bus=vendor`` or ``bus=vendor:device``."""
    bus_text, sep, ids = token.strip().partition("=")
    bus = _BUS_ALIASES.get(bus_text.strip().lower())
    if bus is None:
        known = ", ".join(sorted(_BUS_ALIASES))
        raise FilterSyntaxError(f"Unknown bus '{bus_text}' in filter '{token}'. Known: {known}")
    if not sep:
        return FilterRule(bus=bus)
    if bus not in _IDENTIFIED_BUSES:
        raise FilterSyntaxError(f"Filter '{token}': {bus.value} devices have no vendor/device ids")
    if ":" in ids:
        vendor, device = parse_vendor_device(ids, context=f"Filter '{token}'")
        return FilterRule(bus=bus, vendor_id=vendor, device_id=device)
    return FilterRule(bus=bus, vendor_id=parse_hex_id(ids, context=f"Filter '{token}'"))


def usb_vendor_rule(text: str) -> FilterRule:
    return FilterRule(bus=BusFamily.USB, vendor_id=parse_hex_id(text, context="--vid"))


def usb_pair_rule(text: str) -> FilterRule:
    vendor, device = parse_vendor_device(text, context="--pid")
    return FilterRule(bus=BusFamily.USB, vendor_id=vendor, device_id=device)


def build_filter_specification(rules: Iterable[FilterRule]) -> FilterSpecification:
    modes: dict[BusFamily, MatchMode] = {}
    vendors: dict[BusFamily, set[int]] = {}
    pairs: dict[BusFamily, set[int]] = {}

    for rule in rules:
        current = modes.get(rule.bus, MatchMode.NONE)
        if _MODE_RANK[rule.mode] > _MODE_RANK[current]:
            modes[rule.bus] = rule.mode
        if rule.mode is MatchMode.VENDOR_SET:
            vendors.setdefault(rule.bus, set()).add(rule.vendor_id)
        elif rule.mode is MatchMode.VENDOR_DEVICE_PAIR_SET:
            pairs.setdefault(rule.bus, set()).add((rule.vendor_id << 16) | rule.device_id)

    return FilterSpecification(
        modes=modes,
        vendor_sets={bus: frozenset(ids) for bus, ids in vendors.items()},
        device_pair_sets={bus: frozenset(ids) for bus, ids in pairs.items()},
    )
