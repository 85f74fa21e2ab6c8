"""Windows device source using WMI (Win32_PnPEntity) and the device registry."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any

from portlist.core.errors import EnumerationError
from portlist.core.model import DeviceProperty
from portlist.sources.base import DEVICE_CLASSES

_PORT_SUFFIX_RE = re.compile(r"\(((?:COM|LPT)\d+)\)\s*$", re.IGNORECASE)
_ENUM_KEY = "SYSTEM\\CurrentControlSet\\Enum\\"
# ConfigManagerErrorCode for "device is not connected"
_CM_PROB_PHANTOM = 45
LOGGER = logging.getLogger(__name__)


def _registry_values(subkey: str) -> dict[str, Any]:
    import winreg  # type: ignore

    values: dict[str, Any] = {}
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, subkey) as key:
            index = 0
            while True:
                try:
                    name, value, _kind = winreg.EnumValue(key, index)
                except OSError:
                    break
                values[name] = value
                index += 1
    except OSError:
        LOGGER.debug("No registry key %s", subkey)
    return values


class WmiRecord:
    """Wraps one Win32_PnPEntity; WMI properties are read on attribute access."""

    def __init__(self, entity: Any, errors: tuple[type[BaseException], ...] = ()) -> None:
        self._entity = entity
        # COM errors raised by property reads; a failed read counts as absent
        self._errors = errors
        self._device_id = ""
        self._device_id = self._read("DeviceID") or self._read("PNPDeviceID") or ""
        self._parameters: dict[str, Any] | None = None
        self.port_name = self._resolve_port_name()

    def _read(self, name: str) -> Any:
        try:
            return getattr(self._entity, name, None)
        except self._errors as exc:
            LOGGER.debug("Reading %s of %s failed: %s", name, self._device_id or "device", exc)
            return None

    def _device_parameters(self) -> dict[str, Any]:
        if self._parameters is None:
            self._parameters = _registry_values(_ENUM_KEY + self._device_id + "\\Device Parameters")
        return self._parameters

    def _resolve_port_name(self) -> str | None:
        port_name = self._device_parameters().get("PortName")
        if isinstance(port_name, str) and port_name:
            return port_name
        match = _PORT_SUFFIX_RE.search(self._read("Name") or "")
        return match.group(1).upper() if match else None

    def is_available(self) -> bool:
        present = self._read("Present")
        if present is not None:
            return bool(present)
        return self._read("ConfigManagerErrorCode") != _CM_PROB_PHANTOM

    def hardware_id(self) -> str | None:
        hardware_ids = self._read("HardwareID")
        if not hardware_ids:
            return None
        if isinstance(hardware_ids, str):
            return hardware_ids
        return hardware_ids[0]

    def lookup(self, prop: DeviceProperty) -> str | None:
        if prop is DeviceProperty.DESCRIPTION:
            return self._read("Description") or self._read("Name")
        if prop is DeviceProperty.MANUFACTURER:
            return self._read("Manufacturer")
        if prop is DeviceProperty.DEVICE_CLASS:
            return self._read("PNPClass")
        if prop is DeviceProperty.LOCATION:
            location = _registry_values(_ENUM_KEY + self._device_id).get("LocationInformation")
            return location if isinstance(location, str) else None
        if prop is DeviceProperty.PHYSICAL_OBJECT:
            return self._physical_object_name()
        return None

    def _physical_object_name(self) -> str | None:
        # Win32_PnPEntity.GetDeviceProperties exists from Windows 10 onwards
        try:
            result = self._entity.GetDeviceProperties(["DEVPKEY_Device_PDOName"])
        except Exception:  # pragma: no cover - COM dispatch dependent
            LOGGER.debug("GetDeviceProperties unavailable for %s", self._device_id)
            return None
        for item in result[0] if result and result[0] else ():
            data = getattr(item, "Data", None)
            if isinstance(data, str) and data:
                return data
        return None

    def registry_value(self, name: str) -> int | None:
        value = self._device_parameters().get(name)
        return value if isinstance(value, int) else None


class WmiDeviceSource:
    def records(
        self,
        *,
        include_absent: bool = False,
        device_classes: tuple[str, ...] = DEVICE_CLASSES,
    ) -> Iterator[WmiRecord]:
        try:
            import pywintypes  # type: ignore
            import win32com.client  # type: ignore
        except ImportError as exc:
            raise EnumerationError(
                "pywin32 is required to enumerate ports on Windows. Install it with 'pip install pywin32'."
            ) from exc

        where = " OR ".join(f"PNPClass = '{device_class}'" for device_class in device_classes)
        try:
            locator = win32com.client.Dispatch("WbemScripting.SWbemLocator")
            service = locator.ConnectServer(".", "root\\cimv2")
            entities = service.ExecQuery(f"SELECT * FROM Win32_PnPEntity WHERE {where}")
            for entity in entities:
                record = WmiRecord(entity, errors=(pywintypes.com_error,))
                if not include_absent and not record.is_available():
                    continue
                yield record
        except pywintypes.com_error as exc:
            raise EnumerationError(f"WMI device query failed: {exc}") from exc
