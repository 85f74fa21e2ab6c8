"""Plain-text rendering of a port list."""

from __future__ import annotations

from portlist.core.model import DeviceIdentity, PortListResult, ReportOptions

_BRIEF_HEADER = "Port   A Description"
_LONG_HEADER = "Port    A Bus    VID  PID  Rev  Product, Vendor"
_INDENT = "\t  "


def _hex4(value: int | None) -> str:
    return f"{value:04X} " if value is not None else "     "


def _availability(port: DeviceIdentity) -> str:
    return "Y" if port.is_available else "n"


def _brief_line(port: DeviceIdentity) -> str:
    description = (port.description or "")[:30]
    return f"{port.port_name:<6} {_availability(port)} {description}".rstrip()


def _long_line(port: DeviceIdentity) -> str:
    hardware = port.hardware
    line = f"{port.port_name:<6}  {_availability(port)} "
    if hardware.vendor_id is not None or hardware.product_id is not None or hardware.revision is not None:
        line += f"{hardware.bus_label:<6} "
        line += _hex4(hardware.vendor_id) + _hex4(hardware.product_id) + _hex4(hardware.revision)
    else:
        line += f"{hardware.bus_label:<21} "
    return line + f"{(port.description or '')[:30]}, {(port.manufacturer or '')[:20]}"


def _verbose_lines(port: DeviceIdentity) -> list[str]:
    lines: list[str] = []
    hardware = port.hardware
    if port.device_class:
        lines.append(f"{_INDENT}Device Class: {port.device_class}")
    if port.raw_hardware_id:
        lines.append(f"{_INDENT}Hardware Id: {port.raw_hardware_id}")
    if hardware.subsystem_id is not None:
        lines.append(
            f"{_INDENT}PCI Subsystem: {hardware.subsystem_id >> 16:04X}:{hardware.subsystem_id & 0xFFFF:04X}"
        )
    if hardware.usb_interface is not None:
        lines.append(f"{_INDENT}USB Interface: {hardware.usb_interface}")
    if port.physical_object:
        lines.append(f"{_INDENT}Physical Device Object: {port.physical_object}")
    if port.location:
        lines.append(f"{_INDENT}Location Info: {port.location}")
    if port.serial_number:
        lines.append(f"{_INDENT}Serial Number: {port.serial_number}")
    if port.port_address is not None and port.interrupt is not None:
        lines.append(f"{_INDENT}Legacy port -- address {port.port_address:04X}, interrupt {port.interrupt}")
    if port.port_index is not None and port.indexed is not None:
        if port.indexed:
            lines.append(f"{_INDENT}Multi-port device -- port index {port.port_index}")
        else:
            lines.append(f"{_INDENT}Multi-port device -- port bitmap 0x{port.port_index:04X}")
    return lines


def render_report(result: PortListResult, options: ReportOptions) -> list[str]:
    lines: list[str] = []
    if options.long_form:
        lines.append(_LONG_HEADER)
        for index, port in enumerate(result.ports):
            lines.append(_long_line(port))
            if options.verbose:
                lines.extend(_verbose_lines(port))
                if index + 1 < len(result.ports):
                    lines.append("")
    else:
        lines.append(_BRIEF_HEADER)
        lines.extend(_brief_line(port) for port in result.ports)

    matching = "matching " if result.matching else ""
    plural = "" if result.count == 1 else "s"
    lines.append("")
    lines.append(f"{result.count} {matching}port{plural} found.")
    return lines
