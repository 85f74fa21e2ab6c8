"""Stable public API for building tooling on top of portlist.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable

from portlist.core.errors import (
    EnumerationError,
    FilterSyntaxError,
    OptionConflictError,
    PortlistError,
    PresetLoadError,
    PresetNotFoundError,
    PresetValidationError,
)
from portlist.core.hardware_id import parse_hardware_id
from portlist.core.model import (
    BusFamily,
    DeviceIdentity,
    DeviceProperty,
    FilterRule,
    FilterSpecification,
    HardwareIdentity,
    MatchMode,
    PortFamily,
    PortListResult,
    Preset,
    ReportOptions,
    Retrieved,
)
from portlist.core.report import render_report
from portlist.core.service import PortListService
from portlist.sources.base import DeviceSource, RawDeviceRecord, StaticRecord

__all__ = [
    "PortlistError",
    "EnumerationError",
    "FilterSyntaxError",
    "OptionConflictError",
    "PresetLoadError",
    "PresetNotFoundError",
    "PresetValidationError",
    "BusFamily",
    "DeviceIdentity",
    "DeviceProperty",
    "FilterRule",
    "FilterSpecification",
    "HardwareIdentity",
    "MatchMode",
    "PortFamily",
    "PortListResult",
    "Preset",
    "ReportOptions",
    "Retrieved",
    "DeviceSource",
    "RawDeviceRecord",
    "StaticRecord",
    "parse_hardware_id",
    "Client",
]


class Client:
    """Public client for listing and filtering ports.

    A `Client` wraps preset loading, filter construction, device enumeration
    and report rendering. Pass ``source`` to enumerate something other than the
    platform's default device source.
    """

    def __init__(self, *, source: DeviceSource | None = None) -> None:
        self._service = PortListService(source=source)

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def list_presets(self) -> list[Preset]:
        return self._service.list_presets()

    def build_filter(
        self,
        tokens: Iterable[str] = (),
        *,
        vids: Iterable[str] = (),
        pairs: Iterable[str] = (),
        presets: Iterable[str] = (),
    ) -> FilterSpecification:
        return self._service.build_filter(tokens, vids=vids, pairs=pairs, preset_ids=presets)

    def list_ports(
        self,
        spec: FilterSpecification | None = None,
        options: ReportOptions | None = None,
    ) -> PortListResult:
        return self._service.list_ports(spec, options)

    def report(
        self,
        spec: FilterSpecification | None = None,
        options: ReportOptions | None = None,
    ) -> str:
        options = options or ReportOptions()
        return "\n".join(render_report(self._service.list_ports(spec, options), options))
