from portlist.core.catalog import PortCatalog, port_name_key
from portlist.core.model import DeviceIdentity


def _names(catalog: PortCatalog) -> list[str]:
    return [device.port_name for device in catalog.to_sequence()]


def test_key_splits_prefix_and_number() -> None:
    key = port_name_key("COM128")
    assert key.prefix == "COM"
    assert key.number == 128
    assert key.name == "COM128"


def test_key_without_digits() -> None:
    key = port_name_key("AUX")
    assert key.prefix == "AUX"
    assert key.number is None


def test_numeric_suffix_ordering() -> None:
    assert port_name_key("COM2") < port_name_key("COM10")
    assert port_name_key("AUX") < port_name_key("COM1")


def test_absent_number_sorts_first() -> None:
    assert port_name_key("PRN") < port_name_key("PRN1")


def test_differing_prefix_length_compares_full_names() -> None:
    assert port_name_key("COM1") < port_name_key("ttyUSB0")
    assert port_name_key("COM99") < port_name_key("COMX1")


def test_equal_numbers_fall_back_to_name() -> None:
    assert port_name_key("COM01") < port_name_key("COM1")
    assert port_name_key("COM1") == port_name_key("COM1")


def test_insertion_order_yields_sorted_sequence() -> None:
    catalog = PortCatalog()
    for name in ("COM3", "COM1", "COM10", "LPT1"):
        catalog.insert(DeviceIdentity(port_name=name))
    assert _names(catalog) == ["COM1", "COM3", "COM10", "LPT1"]
    assert len(catalog) == 4


def test_equal_keys_keep_insertion_order() -> None:
    catalog = PortCatalog()
    first = DeviceIdentity(port_name="COM1", description="first")
    second = DeviceIdentity(port_name="COM1", description="second")
    catalog.insert(first)
    catalog.insert(DeviceIdentity(port_name="COM0"))
    catalog.insert(second)
    assert [d.description for d in catalog if d.port_name == "COM1"] == ["first", "second"]


def test_insert_accepts_precomputed_key() -> None:
    catalog = PortCatalog()
    catalog.insert(DeviceIdentity(port_name="COM5"), port_name_key("COM5"))
    catalog.insert(DeviceIdentity(port_name="COM4"))
    assert _names(catalog) == ["COM4", "COM5"]
