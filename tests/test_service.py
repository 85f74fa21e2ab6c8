from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from portlist.core.errors import EnumerationError, PresetNotFoundError
from portlist.core.model import BusFamily, DeviceProperty, MatchMode, PortFamily, ReportOptions
from portlist.core.service import PortListService
from portlist.sources.base import DEVICE_CLASSES, PORTS_CLASS, StaticRecord


def _record(name: str | None, hardware: str | None = None, available: bool = True, **props: str) -> StaticRecord:
    return StaticRecord(
        port_name=name,
        available=available,
        hardware=hardware,
        properties={DeviceProperty[key.upper()]: value for key, value in props.items()},
    )


RECORDS = [
    _record("COM10", "USB\\VID_2341&PID_0043&REV_0001", description="Arduino Uno"),
    _record("COM3", "USB\\VID_0403&PID_6001&REV_0600", description="USB Serial Port", manufacturer="FTDI"),
    _record("LPT1", "ACPI\\PNP0401", description="Printer Port"),
    _record("COM1", "ACPI\\PNP0501", description="Communications Port"),
    _record("COM7", "BTHENUM\\{00001101-0000-1000-8000-00805f9b34fb}_LOCALMFG&0002", available=False),
]


class FakeSource:
    def __init__(self, records: list[StaticRecord]) -> None:
        self._records = records
        self.calls: list[tuple[bool, tuple[str, ...]]] = []

    def records(self, *, include_absent: bool = False, device_classes: tuple[str, ...] = DEVICE_CLASSES):
        self.calls.append((include_absent, device_classes))
        return [r for r in self._records if include_absent or r.is_available()]


class CountingRecord:
    def __init__(self, name: str, hardware: str) -> None:
        self.port_name = name
        self._hardware = hardware
        self.hardware_calls = 0
        self.lookups: list[DeviceProperty] = []

    def is_available(self) -> bool:
        return True

    def hardware_id(self) -> str | None:
        self.hardware_calls += 1
        return self._hardware

    def lookup(self, prop: DeviceProperty) -> str | None:
        self.lookups.append(prop)
        return None

    def registry_value(self, name: str) -> int | None:
        return None


@pytest.fixture(autouse=True)
def isolated_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def _names(result) -> list[str]:
    return [port.port_name for port in result.ports]


def test_lists_present_ports_sorted() -> None:
    source = FakeSource(RECORDS)
    result = PortListService(source=source).list_ports()
    assert _names(result) == ["COM1", "COM3", "COM10", "LPT1"]
    assert result.count == 4
    assert not result.matching
    assert source.calls == [(False, DEVICE_CLASSES)]


def test_all_includes_remembered_ports() -> None:
    result = PortListService(source=FakeSource(RECORDS)).list_ports(options=ReportOptions(include_absent=True))
    assert "COM7" in _names(result)
    assert not next(p for p in result.ports if p.port_name == "COM7").is_available


def test_exclude_available_keeps_only_remembered_ports() -> None:
    service = PortListService(source=FakeSource(RECORDS))
    options = ReportOptions(exclude_available=True)
    assert options.include_absent
    first = service.list_ports(options=options)
    second = service.list_ports(options=options)
    assert _names(first) == ["COM7"]
    assert first.ports == second.ports


def test_com_only_uses_port_name_family() -> None:
    records = [_record("LPT1"), _record("COM2"), _record("AUX"), _record("COM0"), _record("ttyUSB0")]
    result = PortListService(source=FakeSource(records)).list_ports(
        options=ReportOptions(port_family=PortFamily.COM_ONLY)
    )
    assert _names(result) == ["AUX", "COM2", "ttyUSB0"]


def test_lpt_only_skips_modem_classes() -> None:
    records = [_record("LPT1"), _record("COM2"), _record("PRN"), _record("COM0")]
    source = FakeSource(records)
    result = PortListService(source=source).list_ports(options=ReportOptions(port_family=PortFamily.LPT_ONLY))
    assert _names(result) == ["COM0", "LPT1", "PRN"]
    assert source.calls[0][1] == (PORTS_CLASS,)


def test_vendor_filter_accepts_only_matching_devices() -> None:
    service = PortListService(source=FakeSource(RECORDS))
    result = service.list_ports(service.build_filter(["usb=0403"]))
    assert _names(result) == ["COM3"]
    assert result.matching
    assert result.ports[0].hardware.vendor_id == 0x0403


def test_bluetooth_any_filter() -> None:
    service = PortListService(source=FakeSource(RECORDS))
    result = service.list_ports(service.build_filter(["bt"]), ReportOptions(include_absent=True))
    assert _names(result) == ["COM7"]
    assert result.ports[0].hardware.bus_family is BusFamily.BLUETOOTH


def test_build_filter_combines_options_and_presets() -> None:
    service = PortListService(source=FakeSource([]))
    spec = service.build_filter(["pci"], vids=["067b"], pairs=["1d50:6098"], preset_ids=["ftdi"])
    assert spec.mode_for(BusFamily.PCI) is MatchMode.ANY
    assert spec.vendors(BusFamily.USB) == frozenset({0x067B, 0x0403})
    assert spec.pairs(BusFamily.USB) == frozenset({0x1D506098})


def test_unknown_preset_rejected() -> None:
    service = PortListService(source=FakeSource([]))
    with pytest.raises(PresetNotFoundError):
        service.build_filter(preset_ids=["nope"])


def test_brief_listing_skips_optional_lookups() -> None:
    record = CountingRecord("COM4", "USB\\VID_0403&PID_6001")
    result = PortListService(source=FakeSource([record])).list_ports()
    assert result.count == 1
    assert record.hardware_calls == 0
    assert record.lookups == [DeviceProperty.DESCRIPTION]
    assert result.ports[0].raw_hardware_id is None


def test_rejected_device_skips_long_form_lookups() -> None:
    record = CountingRecord("COM4", "USB\\VID_0403&PID_6001")
    service = PortListService(source=FakeSource([record]))
    result = service.list_ports(service.build_filter(["pci"]), ReportOptions(long_form=True))
    assert result.count == 0
    assert record.hardware_calls == 1
    assert DeviceProperty.MANUFACTURER not in record.lookups
    assert record.lookups == [DeviceProperty.DESCRIPTION]


def test_verbose_reads_registry_details() -> None:
    record = StaticRecord(
        port_name="COM5",
        hardware="MF\\MULTIPORT&PNP0501",
        registry={"PortIndex": 2, "Indexed": 1, "PortAddress": 0x2F8, "Interrupt": 3},
        properties={DeviceProperty.LOCATION: "PCI bus 3, device 0, function 0"},
    )
    result = PortListService(source=FakeSource([record])).list_ports(options=ReportOptions(verbose=True))
    port = result.ports[0]
    assert port.raw_hardware_id == "MF\\MULTIPORT&PNP0501"
    assert (port.port_index, port.indexed) == (2, True)
    assert (port.port_address, port.interrupt) == (0x2F8, 3)
    assert port.location == "PCI bus 3, device 0, function 0"


def test_records_without_port_name_are_dropped() -> None:
    result = PortListService(source=FakeSource([_record(None), _record("COM1")])).list_ports()
    assert _names(result) == ["COM1"]


def test_enumeration_failure_midway_keeps_processed_ports() -> None:
    class BrokenSource:
        def records(self, **kwargs) -> Iterator[StaticRecord]:
            yield _record("COM2")
            raise EnumerationError("device list vanished")

    result = PortListService(source=BrokenSource()).list_ports()
    assert _names(result) == ["COM2"]
    assert any("device list vanished" in warning for warning in result.warnings)


def test_enumeration_failure_before_any_record_propagates() -> None:
    class FailingSource:
        def records(self, **kwargs):
            raise EnumerationError("no access")

    with pytest.raises(EnumerationError):
        PortListService(source=FailingSource()).list_ports()
