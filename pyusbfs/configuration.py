"""Structured views of USB configuration, interface and endpoint descriptors."""

from __future__ import annotations

from collections.abc import Iterator

from pyusbfs.descriptors import (
    DESCRIPTOR_LEN_CONFIGURATION,
    DESCRIPTOR_LEN_ENDPOINT,
    DESCRIPTOR_LEN_INTERFACE,
    DESCRIPTOR_TYPE_CONFIGURATION,
    DESCRIPTOR_TYPE_ENDPOINT,
    DESCRIPTOR_TYPE_INTERFACE,
    Descriptors,
    Direction,
    EndpointType,
)


def _u8(buf: bytes, pos: int) -> int:
    return buf[pos]


def _u16(buf: bytes, pos: int) -> int:
    return int.from_bytes(buf[pos : pos + 2], "little")


def _nonzero(value: int) -> int | None:
    return value if value != 0 else None


class Configuration:
    """A USB configuration with access to its interfaces, endpoints and other descriptors."""

    def __init__(self, buf: bytes | bytearray | memoryview, *, strict: bool = True) -> None:
        """Wrap ``buf``, which starts with a configuration descriptor.

        With ``strict`` (the default), raises ValueError when the buffer is too
        short, the first descriptor is not a configuration descriptor, or its
        wTotalLength differs from the buffer length.
        """
        data = bytes(buf)
        if strict:
            if len(data) < DESCRIPTOR_LEN_CONFIGURATION:
                raise ValueError("buffer too short for a configuration descriptor")
            if data[0] < DESCRIPTOR_LEN_CONFIGURATION:
                raise ValueError("invalid configuration descriptor bLength")
            if data[1] != DESCRIPTOR_TYPE_CONFIGURATION:
                raise ValueError("first descriptor is not a configuration descriptor")
            if len(data) != _u16(data, 2):
                raise ValueError("wTotalLength does not match buffer length")
        self._buf = data

    def __bytes__(self) -> bytes:
        return self._buf

    def descriptors(self) -> Descriptors:
        """The configuration descriptor followed by all trailing descriptors."""
        return Descriptors(self._buf)

    def interface_alt_settings(self) -> Iterator["InterfaceAltSetting"]:
        """Iterate all interfaces and alternate settings of this configuration."""
        for chunk in self.descriptors().split_by_type(
            DESCRIPTOR_TYPE_INTERFACE, DESCRIPTOR_LEN_INTERFACE
        ):
            yield InterfaceAltSetting(chunk)

    def interfaces(self) -> Iterator["InterfaceGroup"]:
        """Iterate interfaces, grouping alternate settings by interface number."""
        groups: dict[int, list[InterfaceAltSetting]] = {}
        for alt in self.interface_alt_settings():
            groups.setdefault(alt.interface_number(), []).append(alt)
        return iter(
            [InterfaceGroup(number, groups[number]) for number in sorted(groups)]
        )

    def num_interfaces(self) -> int:
        """The bNumInterfaces field."""
        return _u8(self._buf, 4)

    def configuration_value(self) -> int:
        """The bConfigurationValue field, used to select this configuration."""
        return _u8(self._buf, 5)

    def attributes(self) -> int:
        """The bmAttributes field."""
        return _u8(self._buf, 7)

    def max_power(self) -> int:
        """The bMaxPower field, in units of 2 mA."""
        return _u8(self._buf, 8)

    def string_index(self) -> int | None:
        """The iConfiguration string index, or None if there is none."""
        return _nonzero(_u8(self._buf, 6))

    def __repr__(self) -> str:
        alts = ", ".join(repr(a) for a in self.interface_alt_settings())
        return (
            f"Configuration(configuration_value={self.configuration_value()}, "
            f"num_interfaces={self.num_interfaces()}, "
            f"attributes={self.attributes()}, "
            f"max_power={self.max_power()}, "
            f"string_index={self.string_index()}, "
            f"interface_alt_settings=[{alts}])"
        )


class InterfaceGroup:
    """Interface alternate settings that share one interface number."""

    def __init__(self, interface_number: int, alt_settings: list["InterfaceAltSetting"]) -> None:
        self._number = interface_number
        self._alts = list(alt_settings)

    def interface_number(self) -> int:
        """The bInterfaceNumber shared by the alternate settings."""
        return self._number

    def alt_settings(self) -> Iterator["InterfaceAltSetting"]:
        """Iterate the alternate settings of the interface."""
        return iter(self._alts)

    def __repr__(self) -> str:
        return f"InterfaceGroup(interface_number={self._number}, alt_settings={self._alts!r})"


class InterfaceAltSetting:
    """One alternate setting of an interface, with its endpoints and other descriptors."""

    def __init__(self, buf: bytes | bytearray | memoryview) -> None:
        self._buf = bytes(buf)

    def __bytes__(self) -> bytes:
        return self._buf

    def descriptors(self) -> Descriptors:
        """The interface descriptor followed by its trailing descriptors."""
        return Descriptors(self._buf)

    def endpoints(self) -> Iterator["Endpoint"]:
        """Iterate the endpoints of this alternate setting."""
        for chunk in self.descriptors().split_by_type(
            DESCRIPTOR_TYPE_ENDPOINT, DESCRIPTOR_LEN_ENDPOINT
        ):
            yield Endpoint(chunk)

    def interface_number(self) -> int:
        """The bInterfaceNumber field."""
        return _u8(self._buf, 2)

    def alternate_setting(self) -> int:
        """The bAlternateSetting field."""
        return _u8(self._buf, 3)

    def num_endpoints(self) -> int:
        """The bNumEndpoints field."""
        return _u8(self._buf, 4)

    def class_code(self) -> int:
        """The bInterfaceClass field."""
        return _u8(self._buf, 5)

    def subclass(self) -> int:
        """The bInterfaceSubClass field."""
        return _u8(self._buf, 6)

    def protocol(self) -> int:
        """The bInterfaceProtocol field."""
        return _u8(self._buf, 7)

    def string_index(self) -> int | None:
        """The iInterface string index, or None if there is none."""
        return _nonzero(_u8(self._buf, 8))

    def __repr__(self) -> str:
        eps = ", ".join(repr(e) for e in self.endpoints())
        return (
            f"InterfaceAltSetting(interface_number={self.interface_number()}, "
            f"alternate_setting={self.alternate_setting()}, "
            f"num_endpoints={self.num_endpoints()}, "
            f"class_code={self.class_code()}, "
            f"subclass={self.subclass()}, "
            f"protocol={self.protocol()}, "
            f"string_index={self.string_index()}, "
            f"endpoints=[{eps}])"
        )


class Endpoint:
    """A USB endpoint with access to its associated descriptors."""

    def __init__(self, buf: bytes | bytearray | memoryview) -> None:
        self._buf = bytes(buf)

    def __bytes__(self) -> bytes:
        return self._buf

    def descriptors(self) -> Descriptors:
        """The endpoint descriptor and trailing descriptors up to the next endpoint."""
        return Descriptors(self._buf)

    def direction(self) -> Direction:
        """The endpoint's direction, from the address bit 7."""
        return Direction.IN if self.address() & 0x80 else Direction.OUT

    def transfer_type(self) -> EndpointType:
        """The endpoint's transfer type."""
        return EndpointType(self.attributes() & 0x03)

    def max_packet_size(self) -> int:
        """Maximum packet size in bytes."""
        return self.max_packet_size_raw() & ((1 << 11) - 1)

    def packets_per_microframe(self) -> int:
        """For high-speed isochronous endpoints, packets per microframe (1 to 3)."""
        return ((self.max_packet_size_raw() >> 11) & 0b11) + 1

    def address(self) -> int:
        """The bEndpointAddress field."""
        return _u8(self._buf, 2)

    def attributes(self) -> int:
        """The raw bmAttributes field."""
        return _u8(self._buf, 3)

    def max_packet_size_raw(self) -> int:
        """The raw wMaxPacketSize field."""
        return _u16(self._buf, 4)

    def interval(self) -> int:
        """The bInterval field, in frames or microframes."""
        return _u8(self._buf, 6)

    def __repr__(self) -> str:
        return (
            f"Endpoint(address=0x{self.address():02X}, "
            f"direction={self.direction().name}, "
            f"transfer_type={self.transfer_type().name}, "
            f"max_packet_size={self.max_packet_size()}, "
            f"packets_per_microframe={self.packets_per_microframe()}, "
            f"interval={self.interval()})"
        )


class ActiveConfigurationError(Exception):
    """The active configuration could not be determined."""

    def __init__(self, configuration_value: int) -> None:
        self.configuration_value = configuration_value
        if configuration_value == 0:
            message = "device is not configured"
        else:
            message = f"no descriptor found for active configuration {configuration_value}"
        super().__init__(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActiveConfigurationError):
            return NotImplemented
        return self.configuration_value == other.configuration_value

    def __hash__(self) -> int:
        return hash(self.configuration_value)