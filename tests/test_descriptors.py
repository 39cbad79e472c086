import pytest

from pyusbfs.descriptors import (
    DESCRIPTOR_TYPE_CONFIGURATION,
    DESCRIPTOR_TYPE_ENDPOINT,
    DESCRIPTOR_TYPE_INTERFACE,
    Descriptor,
    Descriptors,
    Direction,
    EndpointType,
    parse_concatenated_config_descriptors,
    validate_config_descriptor,
)

ROOT_HUB = bytes(
    [
        0x09, 0x02, 0x19, 0x00, 0x01, 0x01, 0x00, 0xE0, 0x00,
        0x09, 0x04, 0x00, 0x00, 0x01, 0x09, 0x00, 0x00, 0x00,
        0x07, 0x05, 0x81, 0x03, 0x04, 0x00, 0x0C,
    ]
)


def test_concatenated_empty():
    assert list(parse_concatenated_config_descriptors(b"")) == []


def test_concatenated_short():
    assert list(parse_concatenated_config_descriptors(bytes([0]))) == []


def test_concatenated_invalid_total_len():
    assert list(parse_concatenated_config_descriptors(bytes([9, 2, 0, 0, 0, 0, 0, 0, 0]))) == []


def test_concatenated_one_config():
    one = bytes([9, 2, 9, 0, 0, 0, 0, 0, 0])
    assert list(parse_concatenated_config_descriptors(one)) == [one]

    longer = bytes([9, 2, 13, 0, 0, 0, 0, 0, 0, 4, 0, 0, 0])
    assert list(parse_concatenated_config_descriptors(longer)) == [longer]


def test_concatenated_two_configs():
    data = bytes([9, 2, 13, 0, 0, 0, 0, 0, 0, 4, 0, 0, 0, 9, 2, 9, 0, 0, 0, 0, 0, 0])
    assert list(parse_concatenated_config_descriptors(data)) == [
        bytes([9, 2, 13, 0, 0, 0, 0, 0, 0, 4, 0, 0, 0]),
        bytes([9, 2, 9, 0, 0, 0, 0, 0, 0]),
    ]


def test_validate_config_descriptor_total_length():
    assert validate_config_descriptor(ROOT_HUB) == 0x19


@pytest.mark.parametrize(
    "buf",
    [
        b"",
        bytes([9, 2, 9, 0]),
        bytes([8, 2, 9, 0, 0, 0, 0, 0, 0]),
        bytes([9, 4, 9, 0, 0, 0, 0, 0, 0]),
        bytes([9, 2, 20, 0, 0, 0, 0, 0, 0]),
    ],
)
def test_validate_config_descriptor_rejects(buf):
    assert validate_config_descriptor(buf) is None


def test_descriptor_fields():
    d = Descriptor(bytes([7, 5, 0x81, 3, 4, 0, 12]))
    assert d.descriptor_len() == 7
    assert d.descriptor_type() == DESCRIPTOR_TYPE_ENDPOINT
    assert d[2] == 0x81
    assert bytes(d) == bytes([7, 5, 0x81, 3, 4, 0, 12])


@pytest.mark.parametrize("buf", [b"", bytes([1]), bytes([5, 1, 0])])
def test_descriptor_rejects_invalid(buf):
    with pytest.raises(ValueError):
        Descriptor(buf)


def test_descriptors_iteration_types():
    types = [d.descriptor_type() for d in Descriptors(ROOT_HUB)]
    assert types == [
        DESCRIPTOR_TYPE_CONFIGURATION,
        DESCRIPTOR_TYPE_INTERFACE,
        DESCRIPTOR_TYPE_ENDPOINT,
    ]


def test_descriptors_as_bytes_tracks_remaining():
    it = Descriptors(ROOT_HUB)
    assert it.as_bytes() == ROOT_HUB
    first = next(it)
    assert first.descriptor_len() == 9
    assert it.as_bytes() == ROOT_HUB[9:]


def test_descriptors_stop_on_short_length():
    assert list(Descriptors(bytes([1, 2, 3]))) == []


def test_descriptors_stop_on_overlong_length():
    assert list(Descriptors(bytes([3, 1, 0, 5, 1, 0]))) == [Descriptor(bytes([3, 1, 0]))]


def test_split_by_type_groups_trailing_descriptors():
    chunks = list(Descriptors(ROOT_HUB).split_by_type(DESCRIPTOR_TYPE_INTERFACE, 9))
    assert chunks == [ROOT_HUB[9:]]


def test_split_by_type_does_not_consume():
    it = Descriptors(ROOT_HUB)
    list(it.split_by_type(DESCRIPTOR_TYPE_INTERFACE, 9))
    assert it.as_bytes() == ROOT_HUB


def test_split_by_type_malformed():
    data = bytes([9, 2, 0, 0, 0, 1, 0, 0, 2, 5, 250, 0, 0, 0])
    assert list(Descriptors(data).split_by_type(DESCRIPTOR_TYPE_INTERFACE, 9)) == []


def test_split_by_type_skips_short_descriptor():
    short = bytes([3, 4, 0])
    full = bytes([9, 4, 1, 0, 0, 0, 0, 0, 0])
    ep = bytes([7, 5, 0x81, 2, 64, 0, 0])
    chunks = list(Descriptors(short + full + ep).split_by_type(DESCRIPTOR_TYPE_INTERFACE, 9))
    assert chunks == [full + ep]


def test_split_by_type_multiple_chunks():
    intf0 = bytes([9, 4, 0, 0, 1, 0, 0, 0, 0])
    ep0 = bytes([7, 5, 0x01, 2, 64, 0, 0])
    intf1 = bytes([9, 4, 1, 0, 1, 0, 0, 0, 0])
    ep1 = bytes([7, 5, 0x82, 2, 64, 0, 0])
    chunks = list(
        Descriptors(intf0 + ep0 + intf1 + ep1).split_by_type(DESCRIPTOR_TYPE_INTERFACE, 9)
    )
    assert chunks == [intf0 + ep0, intf1 + ep1]


def test_enum_values():
    assert Direction(0x80) is Direction.IN
    assert Direction(0) is Direction.OUT
    assert [EndpointType(i) for i in range(4)] == [
        EndpointType.CONTROL,
        EndpointType.ISOCHRONOUS,
        EndpointType.BULK,
        EndpointType.INTERRUPT,
    ]