"""Service layer used by CLI and library callers."""

from __future__ import annotations

import dataclasses
import logging
import platform
from collections.abc import Iterable

from portlist.core.catalog import PortCatalog, port_name_key
from portlist.core.device_match import matches
from portlist.core.errors import EnumerationError, PresetNotFoundError
from portlist.core.filter_args import (
    build_filter_specification,
    parse_filter_token,
    usb_pair_rule,
    usb_vendor_rule,
)
from portlist.core.hardware_id import parse_hardware_id
from portlist.core.model import (
    DeviceIdentity,
    DeviceProperty,
    FilterRule,
    FilterSpecification,
    PortFamily,
    PortListResult,
    Preset,
    ReportOptions,
)
from portlist.core.preset_loader import load_presets
from portlist.sources.base import DEVICE_CLASSES, PORTS_CLASS, DeviceSource, RawDeviceRecord
from portlist.sources.serial_ports import SerialPortSource
from portlist.sources.wmi import WmiDeviceSource

LOGGER = logging.getLogger(__name__)


class PortListService:
    def __init__(self, *, source: DeviceSource | None = None) -> None:
        loaded = load_presets()
        self.presets = loaded.presets
        self.load_warnings = loaded.warnings
        self.source = source or _default_source()

    def list_presets(self) -> list[Preset]:
        return sorted(self.presets.values(), key=lambda p: p.id)

    def build_filter(
        self,
        tokens: Iterable[str] = (),
        *,
        vids: Iterable[str] = (),
        pairs: Iterable[str] = (),
        preset_ids: Iterable[str] = (),
    ) -> FilterSpecification:
        rules: list[FilterRule] = [parse_filter_token(token) for token in tokens]
        rules.extend(usb_vendor_rule(vid) for vid in vids)
        rules.extend(usb_pair_rule(pair) for pair in pairs)
        for preset_id in preset_ids:
            preset = self.presets.get(preset_id)
            if preset is None:
                available = ", ".join(sorted(self.presets))
                raise PresetNotFoundError(f"Unknown preset '{preset_id}'. Available: {available}")
            rules.extend(preset.rules)
        return build_filter_specification(rules)

    def list_ports(
        self,
        spec: FilterSpecification | None = None,
        options: ReportOptions | None = None,
    ) -> PortListResult:
        spec = spec or FilterSpecification()
        options = options or ReportOptions()
        catalog = PortCatalog()
        warnings: list[str] = []
        if options.include_absent and isinstance(self.source, SerialPortSource):
            warnings.append(
                "Remembered ports are only known to the Windows device registry; "
                "pyserial lists present ports only."
            )

        # modems and multi-port boards only carry COM ports
        device_classes = (PORTS_CLASS,) if options.port_family is PortFamily.LPT_ONLY else DEVICE_CLASSES
        processed = 0
        try:
            for record in self.source.records(
                include_absent=options.include_absent,
                device_classes=device_classes,
            ):
                processed += 1
                identity = _accept(record, spec, options)
                if identity is not None:
                    catalog.insert(identity)
        except EnumerationError as exc:
            if processed == 0:
                raise
            warning = f"Device enumeration stopped after {processed} devices: {exc}"
            LOGGER.warning(warning)
            warnings.append(warning)

        return PortListResult(
            ports=catalog.to_sequence(),
            matching=spec.is_active,
            warnings=tuple(warnings),
        )


def is_com_port(name: str, prefix: str, number: int | None) -> bool:
    return name == "AUX" or (bool(number) and prefix == "COM")


def _accept(
    record: RawDeviceRecord,
    spec: FilterSpecification,
    options: ReportOptions,
) -> DeviceIdentity | None:
    name = record.port_name
    if not name:
        LOGGER.debug("Skipping device without a port name")
        return None

    key = port_name_key(name)
    if options.port_family is not PortFamily.ALL and len(key.prefix) == 3:
        wants_com = options.port_family is PortFamily.COM_ONLY
        if is_com_port(name, key.prefix, key.number) != wants_com:
            LOGGER.debug("%s: excluded by port family %s", name, options.port_family.value)
            return None

    available = record.is_available()
    if options.exclude_available and available:
        LOGGER.debug("%s: excluded because it is available", name)
        return None

    raw_hardware_id = record.hardware_id() if spec.is_active or options.long_form else None
    identity = DeviceIdentity(
        port_name=name,
        hardware=parse_hardware_id(raw_hardware_id),
        description=record.lookup(DeviceProperty.DESCRIPTION),
        is_available=available,
        raw_hardware_id=raw_hardware_id,
    )

    if spec.is_active and not matches(identity, spec):
        LOGGER.debug("%s: %s identity does not match filter", name, identity.hardware.bus_family.value)
        return None

    if options.long_form:
        identity = dataclasses.replace(identity, manufacturer=record.lookup(DeviceProperty.MANUFACTURER))
    if options.verbose:
        indexed = record.registry_value("Indexed")
        identity = dataclasses.replace(
            identity,
            device_class=record.lookup(DeviceProperty.DEVICE_CLASS),
            location=record.lookup(DeviceProperty.LOCATION),
            physical_object=record.lookup(DeviceProperty.PHYSICAL_OBJECT),
            serial_number=record.lookup(DeviceProperty.SERIAL_NUMBER),
            port_address=record.registry_value("PortAddress"),
            interrupt=record.registry_value("Interrupt"),
            port_index=record.registry_value("PortIndex"),
            indexed=None if indexed is None else bool(indexed),
        )
    LOGGER.debug("%s: accepted", name)
    return identity


def _default_source() -> DeviceSource:
    if platform.system() == "Windows":
        return WmiDeviceSource()
    return SerialPortSource()

