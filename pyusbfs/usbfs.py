"""Wrappers for the Linux usbfs character device ioctls."""

from __future__ import annotations

import enum
import errno as _errno
import fcntl
import struct
from typing import Protocol, Union

_IOC_NRBITS = 8
_IOC_TYPEBITS = 8
_IOC_SIZEBITS = 14

_IOC_NRSHIFT = 0
_IOC_TYPESHIFT = _IOC_NRSHIFT + _IOC_NRBITS
_IOC_SIZESHIFT = _IOC_TYPESHIFT + _IOC_TYPEBITS
_IOC_DIRSHIFT = _IOC_SIZESHIFT + _IOC_SIZEBITS

_IOC_NONE = 0
_IOC_WRITE = 1
_IOC_READ = 2

_UINT = struct.Struct("=I")
_SET_ALT_SETTING = struct.Struct("=ii")


def _ioc(direction: int, kind: str, nr: int, size: int) -> int:
    return (
        (direction << _IOC_DIRSHIFT)
        | (ord(kind) << _IOC_TYPESHIFT)
        | (nr << _IOC_NRSHIFT)
        | (size << _IOC_SIZESHIFT)
    )


def _io(kind: str, nr: int) -> int:
    return _ioc(_IOC_NONE, kind, nr, 0)


def _ior(kind: str, nr: int, size: int) -> int:
    return _ioc(_IOC_READ, kind, nr, size)


USBDEVFS_SETINTERFACE = _ior("U", 4, _SET_ALT_SETTING.size)
USBDEVFS_SETCONFIGURATION = _ior("U", 5, _UINT.size)
USBDEVFS_CLAIMINTERFACE = _ior("U", 15, _UINT.size)
USBDEVFS_RELEASEINTERFACE = _ior("U", 16, _UINT.size)
USBDEVFS_RESET = _io("U", 20)

USBDEVFS_URB_TYPE_ISO = 0
USBDEVFS_URB_TYPE_INTERRUPT = 1
USBDEVFS_URB_TYPE_CONTROL = 2
USBDEVFS_URB_TYPE_BULK = 3


class _HasFileno(Protocol):
    def fileno(self) -> int: ...


FileDescriptor = Union[int, _HasFileno]


class TransferError(enum.Enum):
    """Reason a USB transfer failed."""

    CANCELLED = "cancelled"
    STALL = "stall"
    DISCONNECTED = "disconnected"
    FAULT = "fault"
    UNKNOWN = "unknown"


def _errno_table() -> dict[int, TransferError]:
    names = {
        "ENODEV": TransferError.DISCONNECTED,
        "ESHUTDOWN": TransferError.DISCONNECTED,
        "EPIPE": TransferError.STALL,
        "ENOENT": TransferError.CANCELLED,
        "ECONNRESET": TransferError.CANCELLED,
        "ETIMEDOUT": TransferError.CANCELLED,
        "EPROTO": TransferError.FAULT,
        "EILSEQ": TransferError.FAULT,
        "EOVERFLOW": TransferError.FAULT,
        "ECOMM": TransferError.FAULT,
        "ETIME": TransferError.FAULT,
    }
    return {
        getattr(_errno, name): kind
        for name, kind in names.items()
        if hasattr(_errno, name)
    }


_ERRNO_TO_TRANSFER_ERROR = _errno_table()


def errno_to_transfer_error(errno: int) -> TransferError:
    """Classify an OS error number reported for a transfer."""
    return _ERRNO_TO_TRANSFER_ERROR.get(errno, TransferError.UNKNOWN)


def _check_u8(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")
    return value


def set_configuration(fd: FileDescriptor, configuration: int) -> None:
    """Select the device configuration with bConfigurationValue ``configuration``."""
    value = _check_u8("configuration", configuration)
    fcntl.ioctl(fd, USBDEVFS_SETCONFIGURATION, _UINT.pack(value))


def claim_interface(fd: FileDescriptor, interface: int) -> None:
    """Claim interface number ``interface`` for this file descriptor."""
    value = _check_u8("interface", interface)
    fcntl.ioctl(fd, USBDEVFS_CLAIMINTERFACE, _UINT.pack(value))


def release_interface(fd: FileDescriptor, interface: int) -> None:
    """Release a previously claimed interface."""
    value = _check_u8("interface", interface)
    fcntl.ioctl(fd, USBDEVFS_RELEASEINTERFACE, _UINT.pack(value))


def set_interface(fd: FileDescriptor, interface: int, alt_setting: int) -> None:
    """Select alternate setting ``alt_setting`` of ``interface``."""
    payload = _SET_ALT_SETTING.pack(
        _check_u8("interface", interface),
        _check_u8("alt_setting", alt_setting),
    )
    fcntl.ioctl(fd, USBDEVFS_SETINTERFACE, payload)


def reset(fd: FileDescriptor) -> None:
    """Reset the device."""
    fcntl.ioctl(fd, USBDEVFS_RESET, 0)