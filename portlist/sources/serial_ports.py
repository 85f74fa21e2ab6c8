"""Serial port source backed by pyserial, used where no device registry exists."""

from __future__ import annotations

import logging
import re

import serial.tools.list_ports
from serial.tools.list_ports_common import ListPortInfo

from portlist.core.errors import EnumerationError
from portlist.core.model import DeviceProperty
from portlist.sources.base import DEVICE_CLASSES, StaticRecord

# "1-1.2:1.0" -> configuration 1, interface 0
_LOCATION_INTERFACE_RE = re.compile(r":\d+\.(\d+)$")
_MISSING = "n/a"
LOGGER = logging.getLogger(__name__)


def _text(value: str | None) -> str | None:
    if not value or value == _MISSING:
        return None
    return value


def _interface_number(location: str | None) -> int | None:
    if not location:
        return None
    match = _LOCATION_INTERFACE_RE.search(location)
    return int(match.group(1)) if match else None


def registry_style_hardware_id(port: ListPortInfo) -> str | None:
    """Express pyserial's USB VID/PID in the ``USB\\VID_xxxx&PID_xxxx`` id grammar."""
    if port.vid is None or port.pid is None:
        return _text(port.hwid)
    hardware_id = f"USB\\VID_{port.vid:04X}&PID_{port.pid:04X}"
    interface = _interface_number(port.location)
    if interface is not None:
        hardware_id += f"&MI_{interface:02X}"
    return hardware_id


def _record_from_port(port: ListPortInfo) -> StaticRecord:
    properties = {
        DeviceProperty.DESCRIPTION: _text(port.description),
        DeviceProperty.MANUFACTURER: _text(port.manufacturer),
        DeviceProperty.LOCATION: _text(port.location),
        DeviceProperty.PHYSICAL_OBJECT: _text(port.device),
        DeviceProperty.SERIAL_NUMBER: _text(port.serial_number),
    }
    return StaticRecord(
        port_name=port.name or port.device,
        available=True,
        hardware=registry_style_hardware_id(port),
        properties={prop: value for prop, value in properties.items() if value is not None},
    )


class SerialPortSource:
    """Lists the serial ports pyserial can see; all of them are present.

    pyserial has no notion of setup classes or remembered devices, so
    ``include_absent`` and ``device_classes`` do not narrow or widen the result.
    """

    def records(
        self,
        *,
        include_absent: bool = False,
        device_classes: tuple[str, ...] = DEVICE_CLASSES,
    ) -> list[StaticRecord]:
        try:
            ports = serial.tools.list_ports.comports()
        except OSError as exc:
            raise EnumerationError(f"Serial port enumeration failed: {exc}") from exc
        LOGGER.debug("pyserial reported %d ports", len(ports))
        return [_record_from_port(port) for port in ports if port.device]
