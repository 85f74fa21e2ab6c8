"""Numeric-aware ordering of port names and the sorted port catalog."""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from dataclasses import dataclass
from functools import total_ordering

from portlist.core.model import DeviceIdentity

_DIGITS = "0123456789"


@total_ordering
@dataclass(frozen=True, eq=False)
class PortNameKey:
    """Sort key splitting ``COM10`` into prefix ``COM`` and number ``10``."""

    prefix: str
    number: int | None
    name: str

    def _compare(self, other: PortNameKey) -> int:
        if len(self.prefix) != len(other.prefix):
            return _cmp(self.name, other.name)
        result = _cmp(self.prefix, other.prefix)
        if result:
            return result
        # absent number sorts first
        result = _cmp(
            -1 if self.number is None else self.number,
            -1 if other.number is None else other.number,
        )
        if result:
            return result
        return _cmp(self.name, other.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PortNameKey):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: PortNameKey) -> bool:
        if not isinstance(other, PortNameKey):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash(self.name)


def _cmp(left: str | int, right: str | int) -> int:
    return (left > right) - (left < right)


def port_name_key(name: str) -> PortNameKey:
    split = next((i for i, ch in enumerate(name) if ch in _DIGITS), len(name))
    if split == len(name):
        return PortNameKey(prefix=name, number=None, name=name)
    end = split
    while end < len(name) and name[end] in _DIGITS:
        end += 1
    return PortNameKey(prefix=name[:split], number=int(name[split:end]), name=name)


class PortCatalog:
    """Accepted devices kept in ascending port name order.

    Devices with equal keys keep their insertion order.
    """

    def __init__(self) -> None:
        self._keys: list[PortNameKey] = []
        self._devices: list[DeviceIdentity] = []

    def insert(self, identity: DeviceIdentity, key: PortNameKey | None = None) -> None:
        key = key or port_name_key(identity.port_name)
        index = bisect.bisect_right(self._keys, key)
        self._keys.insert(index, key)
        self._devices.insert(index, identity)

    def to_sequence(self) -> tuple[DeviceIdentity, ...]:
        return tuple(self._devices)

    def __iter__(self) -> Iterator[DeviceIdentity]:
        return iter(self._devices)

    def __len__(self) -> int:
        return len(self._devices)
