from portlist.core.device_match import matches
from portlist.core.filter_args import build_filter_specification, parse_filter_token
from portlist.core.hardware_id import parse_hardware_id
from portlist.core.model import DeviceIdentity, FilterSpecification, MatchMode, BusFamily

FTDI = "USB\\VID_0403&PID_6001&REV_0600"
ARDUINO_UNO = "USB\\VID_2341&PID_0043&REV_0001"
# Oxford Semiconductor UART on a card sold under another vendor's subsystem id
PCI_CARD = "PCI\\VEN_1415&DEV_C158&SUBSYS_13FE0001&REV_00"
INTEL_KT = "PCI\\VEN_8086&DEV_9D3D&SUBSYS_225D17AA&REV_21"


def _device(hardware_id: str | None) -> DeviceIdentity:
    return DeviceIdentity(port_name="COM1", hardware=parse_hardware_id(hardware_id))


def _spec(*tokens: str) -> FilterSpecification:
    return build_filter_specification(parse_filter_token(token) for token in tokens)


def test_usb_any_ignores_identity_validity() -> None:
    assert matches(_device("USB\\ROOT_HUB"), _spec("usb"))


def test_usb_vendor_set() -> None:
    spec = _spec("usb=0403")
    assert matches(_device(FTDI), spec)
    assert not matches(_device(ARDUINO_UNO), spec)


def test_usb_vendor_requires_full_identity() -> None:
    assert not matches(_device("USB\\VID_0403"), _spec("usb=0403"))


def test_usb_pair_set() -> None:
    spec = _spec("usb=2341:0043")
    assert matches(_device(ARDUINO_UNO), spec)
    assert not matches(_device("USB\\VID_2341&PID_0001"), spec)


def test_usb_pair_mode_also_consults_vendor_set() -> None:
    spec = _spec("usb=0403", "usb=2341:0043")
    assert spec.mode_for(BusFamily.USB) is MatchMode.VENDOR_DEVICE_PAIR_SET
    assert matches(_device(FTDI), spec)
    assert matches(_device(ARDUINO_UNO), spec)


def test_pci_vendor_set_primary_vendor() -> None:
    assert matches(_device(INTEL_KT), _spec("pci=8086"))


def test_pci_vendor_set_matches_differing_subsystem_vendor() -> None:
    assert matches(_device(PCI_CARD), _spec("pci=13fe"))
    assert not matches(_device(PCI_CARD), _spec("pci=0001"))


def test_pci_pair_set_matches_subsystem_pair() -> None:
    assert matches(_device(PCI_CARD), _spec("pci=1415:c158"))
    assert matches(_device(PCI_CARD), _spec("pci=13fe:0001"))
    assert not matches(_device(PCI_CARD), _spec("pci=1415:0001"))


def test_pci_requires_complete_identity() -> None:
    assert not matches(_device("PCI\\VEN_8086&DEV_9D3D"), _spec("pci=8086"))
    assert matches(_device("PCI\\VEN_8086&DEV_9D3D"), _spec("pci"))


def test_bluetooth_any_only() -> None:
    bluetooth = _device("BTHENUM\\{00001101-0000-1000-8000-00805f9b34fb}_LOCALMFG&0000")
    assert matches(bluetooth, _spec("bt"))
    assert not matches(bluetooth, _spec("usb"))


def test_family_without_mode_rejects() -> None:
    assert not matches(_device(FTDI), _spec("pci"))


def test_unknown_bus_never_matches() -> None:
    unknown = _device("ACPI\\PNP0501")
    assert not matches(unknown, _spec("usb", "pci", "bt"))
    assert not matches(_device(None), _spec("usb"))


def test_out_of_range_set_values_degrade_to_no_match() -> None:
    spec = FilterSpecification(
        modes={BusFamily.USB: MatchMode.VENDOR_SET},
        vendor_sets={BusFamily.USB: frozenset({0x1_0000})},
    )
    assert not matches(_device(FTDI), spec)


def test_matching_is_repeatable() -> None:
    spec = _spec("usb=0403", "pci=13fe")
    devices = [_device(FTDI), _device(PCI_CARD), _device(ARDUINO_UNO)]
    first = [matches(d, spec) for d in devices]
    second = [matches(d, spec) for d in reversed(devices)]
    assert first == list(reversed(second)) == [True, True, False]


def test_pci_pair_mode_also_consults_subsystem_vendor() -> None:
    spec = _spec("pci=13fe", "pci=8086:9d3d")
    assert spec.mode_for(BusFamily.PCI) is MatchMode.VENDOR_DEVICE_PAIR_SET
    assert matches(_device(PCI_CARD), spec)
    assert matches(_device(INTEL_KT), spec)
    assert not matches(_device(PCI_CARD), _spec("pci=8086:9d3d"))


def test_pci_subsystem_equal_to_primary_identity() -> None:
    own_subsystem = _device("PCI\\VEN_1415&DEV_C158&SUBSYS_1415C158&REV_00")
    assert matches(own_subsystem, _spec("pci=1415"))
    assert matches(own_subsystem, _spec("pci=1415:c158"))
    assert not matches(own_subsystem, _spec("pci=c158"))
    assert not matches(own_subsystem, _spec("pci=13fe:0001"))
