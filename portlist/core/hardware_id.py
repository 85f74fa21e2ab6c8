"""Parsing of device registry hardware identifier strings.

Only the leading bus label of a hardware id is reliably structured, e.g.
``USB\\VID_0403&PID_6001&REV_0600`` or
``PCI\\VEN_8086&DEV_9D3D&SUBSYS_225D17AA&REV_21``. Everything after it is
scanned opportunistically for ``MARKER_<hex>`` tokens, each one searched from
where the previous token ended.
"""

from __future__ import annotations

import logging
import re

from portlist.core.model import BusFamily, HardwareIdentity

_BUS_LABEL_RE = re.compile(r"[A-Z]*")
_HEX_RUN_RE = re.compile(r"[0-9A-Fa-f]+")
_BUS_LABELS = {
    "USB": BusFamily.USB,
    "PCI": BusFamily.PCI,
    "BTHENUM": BusFamily.BLUETOOTH,
}
# Serial Port Profile service class, present in legacy Bluetooth COM port ids
BLUETOOTH_SPP_MARKER = "00001101-0000-1000-8000-00805F9B34FB"

_UINT8_MAX = 0xFF
_UINT16_MAX = 0xFFFF
_UINT32_MAX = 0xFFFFFFFF
LOGGER = logging.getLogger(__name__)


def _scan_hex(text: str, marker: str, start: int, limit: int) -> tuple[int | None, int]:
    """Find ``marker`` at or after ``start`` and parse the hex run following it.

    Returns the value (``None`` if the marker is absent, no hex digits follow,
    or the value exceeds ``limit``) and the position to continue scanning from.
    """
    index = text.find(marker, start)
    if index < 0:
        return None, start
    match = _HEX_RUN_RE.match(text, index + len(marker))
    if match is None:
        return None, index + len(marker)
    value = int(match.group(), 16)
    if value > limit:
        return None, match.end()
    return value, match.end()


def bus_label(hardware_id: str) -> str:
    return _BUS_LABEL_RE.match(hardware_id).group()


def classify_bus(label: str, hardware_id: str) -> BusFamily:
    family = _BUS_LABELS.get(label)
    if family is not None:
        return family
    if BLUETOOTH_SPP_MARKER in hardware_id.upper():
        return BusFamily.BLUETOOTH
    return BusFamily.UNKNOWN


def _parse_usb(text: str, start: int, family: BusFamily, label: str) -> HardwareIdentity:
    vendor, pos = _scan_hex(text, "VID_", start, _UINT16_MAX)
    product = revision = interface = None
    if vendor is not None:
        product, pos = _scan_hex(text, "PID_", pos, _UINT16_MAX)
        if product is not None:
            revision, after_revision = _scan_hex(text, "REV_", pos, _UINT16_MAX)
            if revision is not None:
                pos = after_revision
            interface, _ = _scan_hex(text, "MI_", pos, _UINT8_MAX)

    has_identity = vendor is not None and product is not None
    if has_identity and family is BusFamily.UNKNOWN:
        family = BusFamily.USB
    return HardwareIdentity(
        bus_family=family,
        bus_label=label,
        vendor_id=vendor,
        product_id=product,
        revision=revision,
        usb_interface=interface,
        has_usb_identity=has_identity,
    )


def _parse_pci(text: str, start: int, family: BusFamily, label: str) -> HardwareIdentity:
    partial = HardwareIdentity(bus_family=family, bus_label=label)

    vendor, pos = _scan_hex(text, "VEN_", start, _UINT16_MAX)
    if vendor is None:
        return partial
    device, pos = _scan_hex(text, "DEV_", pos, _UINT16_MAX)
    if device is None:
        LOGGER.debug("Incomplete PCI id %r: no DEV_ after VEN_", text)
        return partial
    subsystem, pos = _scan_hex(text, "SUBSYS_", pos, _UINT32_MAX)
    if subsystem is None:
        LOGGER.debug("Incomplete PCI id %r: no SUBSYS_ after DEV_", text)
        return partial
    revision, pos = _scan_hex(text, "REV_", pos, _UINT16_MAX)
    if revision is None:
        LOGGER.debug("Incomplete PCI id %r: no REV_ after SUBSYS_", text)
        return partial

    return HardwareIdentity(
        bus_family=family,
        bus_label=label,
        vendor_id=vendor,
        product_id=device,
        revision=revision,
        subsystem_id=subsystem,
        has_pci_identity=True,
    )


def parse_hardware_id(hardware_id: str | None) -> HardwareIdentity:
    """Decode bus family and vendor/product identifiers from a hardware id.

    Never raises: missing markers, bad hex and out-of-range values leave the
    corresponding fields unset. An empty or missing id gives an UNKNOWN
    identity with no fields.
    """
    if not hardware_id:
        return HardwareIdentity()

    label = bus_label(hardware_id)
    family = classify_bus(label, hardware_id)
    if hardware_id.find("VID_", len(label)) >= 0:
        return _parse_usb(hardware_id, len(label), family, label)
    return _parse_pci(hardware_id, len(label), family, label)
