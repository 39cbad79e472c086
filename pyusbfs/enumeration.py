"""Discovery of connected USB devices through Linux sysfs."""

from __future__ import annotations

import enum
import logging
import string
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

log = logging.getLogger(__name__)

SYSFS_PREFIX = "/sys/bus/usb/devices/"

T = TypeVar("T")

_HEX_DIGITS = frozenset(string.hexdigits)
_DEC_DIGITS = frozenset(string.digits)


class Speed(enum.IntEnum):
    """USB connection speed, ordered from slowest to fastest."""

    LOW = 1
    """Low speed (1.5 Mbit)"""
    FULL = 2
    """Full speed (12 Mbit)"""
    HIGH = 3
    """High speed (480 Mbit)"""
    SUPER = 4
    """Super speed (5000 Mbit)"""
    SUPER_PLUS = 5
    """Super speed (10000 Mbit)"""

    @classmethod
    def parse(cls, s: str) -> "Speed | None":
        """Parse a speed name or a sysfs Mbit/s value; None if unrecognised."""
        return _SPEED_NAMES.get(s)


_SPEED_NAMES = {
    "low": Speed.LOW,
    "1.5": Speed.LOW,
    "full": Speed.FULL,
    "12": Speed.FULL,
    "high": Speed.HIGH,
    "480": Speed.HIGH,
    "super": Speed.SUPER,
    "5000": Speed.SUPER,
    "super+": Speed.SUPER_PLUS,
    "10000": Speed.SUPER_PLUS,
}


def _unsigned(s: str, digits: frozenset[str], base: int, bits: int) -> int:
    """Parse an unsigned integer strictly, rejecting values that need more than ``bits``."""
    body = s[1:] if s.startswith("+") else s
    if not body or not set(body) <= digits:
        raise ValueError(f"invalid unsigned integer {s!r}")
    value = int(body, base)
    if value >= 1 << bits:
        raise ValueError(f"{s!r} does not fit in {bits} bits")
    return value


def parse_u8(s: str) -> int:
    """Parse a decimal 8-bit unsigned integer."""
    return _unsigned(s, _DEC_DIGITS, 10, 8)


class SysfsPath:
    """A device directory in sysfs whose files hold device attributes."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """The directory this object reads from."""
        return self._path

    def __fspath__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SysfsPath):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"SysfsPath({str(self._path)!r})"

    def read_attr(self, attr: str, convert: Callable[[str], T] = str) -> T:  # type: ignore[assignment]
        """Read attribute file ``attr``, strip whitespace and pass it to ``convert``.

        Raises OSError when the file cannot be read, and ValueError when its
        contents are not valid text or ``convert`` rejects them.
        """
        attr_path = self._path / attr
        try:
            text = attr_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as exc:
            log.debug("sysfs read %s: %r", attr_path, exc)
            raise
        log.debug("sysfs read %s: %r", attr_path, text)
        return convert(text.strip())

    def read_attr_hex(self, attr: str) -> int:
        """Read attribute file ``attr`` as an unsigned hexadecimal number."""
        text = self.read_attr(attr)
        body = text[1:] if text.startswith("+") else text
        if not body or not set(body) <= _HEX_DIGITS:
            raise ValueError("invalid hex str")
        return int(body, 16)


def _hex_bits(path: SysfsPath, attr: str, bits: int) -> int:
    value = path.read_attr_hex(attr)
    if value >= 1 << bits:
        raise ValueError("invalid hex str")
    return value


@dataclass(frozen=True, repr=False)
class DeviceInfo:
    """Information about a device that can be obtained without opening it."""

    path: SysfsPath
    bus_number: int
    device_address: int
    vendor_id: int
    product_id: int
    device_version: int
    class_code: int
    subclass: int
    protocol: int
    speed: Speed | None = None
    manufacturer_string: str | None = None
    product_string: str | None = None
    serial_number: str | None = None

    def __repr__(self) -> str:
        speed = self.speed.name if self.speed is not None else None
        return (
            "DeviceInfo("
            f"bus_number={self.bus_number}, "
            f"device_address={self.device_address}, "
            f"vendor_id=0x{self.vendor_id:04X}, "
            f"product_id=0x{self.product_id:04X}, "
            f"device_version=0x{self.device_version:04X}, "
            f"class_code={self.class_code}, "
            f"subclass={self.subclass}, "
            f"protocol={self.protocol}, "
            f"speed={speed}, "
            f"manufacturer_string={self.manufacturer_string!r}, "
            f"product_string={self.product_string!r}, "
            f"serial_number={self.serial_number!r}, "
            f"path={self.path!r})"
        )


def _optional(path: SysfsPath, attr: str) -> str | None:
    try:
        return path.read_attr(attr)
    except (OSError, ValueError):
        return None


def probe_device(path: SysfsPath | str | Path) -> DeviceInfo:
    """Read the information of the device at sysfs directory ``path``.

    Raises OSError or ValueError when a required attribute is missing or invalid.
    """
    if not isinstance(path, SysfsPath):
        path = SysfsPath(path)
    log.debug("probe device %r", path)

    speed_text = _optional(path, "speed")
    return DeviceInfo(
        path=path,
        bus_number=path.read_attr("busnum", parse_u8),
        device_address=path.read_attr("devnum", parse_u8),
        vendor_id=_hex_bits(path, "idVendor", 16),
        product_id=_hex_bits(path, "idProduct", 16),
        device_version=_hex_bits(path, "bcdDevice", 16),
        class_code=_hex_bits(path, "bDeviceClass", 8),
        subclass=_hex_bits(path, "bDeviceSubClass", 8),
        protocol=_hex_bits(path, "bDeviceProtocol", 8),
        speed=Speed.parse(speed_text) if speed_text is not None else None,
        manufacturer_string=_optional(path, "manufacturer"),
        product_string=_optional(path, "product"),
        serial_number=_optional(path, "serial"),
    )


def list_devices(root: str | Path = SYSFS_PREFIX) -> Iterator[DeviceInfo]:
    """List the connected devices found under the sysfs directory ``root``.

    Raises OSError at once if ``root`` cannot be read; entries that are not
    devices, or cannot be probed, are skipped.
    """
    entries = list(Path(root).iterdir())

    def probe_all() -> Iterator[DeviceInfo]:
        for entry in entries:
            try:
                yield probe_device(SysfsPath(entry))
            except (OSError, ValueError) as exc:
                log.debug("failed to probe, skipping: %s", exc)

    return probe_all()