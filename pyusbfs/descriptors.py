"""Low-level parsing of USB descriptor byte sequences."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator

log = logging.getLogger(__name__)

DESCRIPTOR_LEN_DEVICE = 18

DESCRIPTOR_TYPE_CONFIGURATION = 0x02
DESCRIPTOR_LEN_CONFIGURATION = 9

DESCRIPTOR_TYPE_INTERFACE = 0x04
DESCRIPTOR_LEN_INTERFACE = 9

DESCRIPTOR_TYPE_ENDPOINT = 0x05
DESCRIPTOR_LEN_ENDPOINT = 7

US_ENGLISH = 0x0409
"""Language ID for US English string descriptors."""


class Direction(enum.IntEnum):
    """Transfer direction, valued as the direction bit of an endpoint address."""

    OUT = 0x00
    IN = 0x80


class EndpointType(enum.IntEnum):
    """Endpoint transfer type, valued as the low bits of bmAttributes."""

    CONTROL = 0
    ISOCHRONOUS = 1
    BULK = 2
    INTERRUPT = 3


class Descriptor(bytes):
    """A single raw USB descriptor.

    Behaves as the descriptor's bytes, and exposes its length and type fields.
    """

    def __new__(cls, buf: bytes | bytearray | memoryview) -> "Descriptor":
        data = bytes(buf)
        if len(data) < 2 or data[0] > len(data):
            raise ValueError(
                "descriptor buffer must be at least 2 bytes and not shorter than bLength"
            )
        return super().__new__(cls, data)

    def descriptor_len(self) -> int:
        """The bLength field."""
        return self[0]

    def descriptor_type(self) -> int:
        """The bDescriptorType field."""
        return self[1]


def _split_first(buf: bytes) -> tuple[bytes, bytes] | None:
    """Split the first descriptor off ``buf``, or return None if there is none."""
    if len(buf) < 2:
        return None
    length = buf[0]
    if length < 2:
        log.warning("descriptor with bLength %d can't point to next descriptor", length)
        return None
    if length > len(buf):
        log.warning(
            "descriptor with bLength %d exceeds remaining buffer length %d",
            length,
            len(buf),
        )
        return None
    return buf[:length], buf[length:]


class Descriptors:
    """An iterator over a sequence of concatenated USB descriptors."""

    def __init__(self, buf: bytes | bytearray | memoryview) -> None:
        self._buf = bytes(buf)

    def as_bytes(self) -> bytes:
        """The concatenated bytes of the remaining descriptors."""
        return self._buf

    def __iter__(self) -> "Descriptors":
        return self

    def __next__(self) -> Descriptor:
        split = _split_first(self._buf)
        if split is None:
            raise StopIteration
        current, self._buf = split
        return Descriptor(current)

    def __repr__(self) -> str:
        return f"Descriptors({self._buf!r})"

    def split_by_type(self, descriptor_type: int, min_len: int) -> Iterator[bytes]:
        """Yield each descriptor of ``descriptor_type`` with the descriptors that follow it.

        Each chunk runs up to the next descriptor of the same type. Descriptors
        of the type shorter than ``min_len`` are skipped. The remaining
        descriptors of this iterator are not consumed.
        """
        buf = self._buf
        while True:
            while True:
                split = _split_first(buf)
                if split is None:
                    return
                _, rest = split
                if buf[1] == descriptor_type:
                    if buf[0] >= min_len:
                        break
                    log.warning(
                        "ignoring descriptor of type %d and length %d because "
                        "the minimum length is %d",
                        buf[1],
                        buf[0],
                        min_len,
                    )
                buf = rest

            end = buf[0]
            while (
                len(buf) >= end + 2
                and buf[end] > 2
                and buf[end + 1] != descriptor_type
                and len(buf) >= end + buf[end]
            ):
                end += buf[end]

            chunk, buf = buf[:end], buf[end:]
            yield chunk


def validate_config_descriptor(buf: bytes | bytearray | memoryview) -> int | None:
    """Check the configuration descriptor at the start of ``buf``.

    Returns its wTotalLength, or None if the buffer does not begin with a
    valid configuration descriptor whose total length fits in the buffer.
    """
    data = bytes(buf)
    if len(data) < DESCRIPTOR_LEN_CONFIGURATION:
        if data:
            log.warning(
                "config descriptor buffer is %d bytes, need %d",
                len(data),
                DESCRIPTOR_LEN_CONFIGURATION,
            )
        return None

    if data[0] < DESCRIPTOR_LEN_CONFIGURATION:
        log.warning("invalid config descriptor bLength")
        return None

    if data[1] != DESCRIPTOR_TYPE_CONFIGURATION:
        log.warning(
            "config bDescriptorType is %d, not a configuration descriptor", data[1]
        )
        return None

    total_len = int.from_bytes(data[2:4], "little")
    if total_len < data[0] or total_len > len(data):
        log.warning(
            "invalid config descriptor wTotalLen of %d (buffer size is %d)",
            total_len,
            len(data),
        )
        return None

    return total_len


def parse_concatenated_config_descriptors(
    buf: bytes | bytearray | memoryview,
) -> Iterator[bytes]:
    """Split a chain of concatenated configuration descriptors by wTotalLength."""
    data = bytes(buf)
    while True:
        total_len = validate_config_descriptor(data)
        if total_len is None:
            return
        yield data[:total_len]
        data = data[total_len:]