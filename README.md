# pyusbfs

Low-level access to USB devices on Linux, with no native library.

The package has two halves:

- **Descriptor parsing.** Walk raw configuration descriptor bytes and get
  configurations, interfaces, alternate settings and endpoints, together
  with the class-specific descriptors that follow each of them.
- **Enumeration and usbfs.** List connected devices from sysfs, and issue
  the usbfs ioctls that select a configuration, claim and release
  interfaces, choose an alternate setting or reset a device.

## Installation

```
pip install pyusbfs
```

Python 3.10 or later is required. Enumeration and the usbfs calls need
Linux; descriptor parsing works anywhere.

## Listing devices

From the command line:

```
pyusbfs
```

prints one line per device found under `/sys/bus/usb/devices/`. The
`--root DIR` option reads device entries from another directory. If the
directory cannot be read, the command prints an error and exits with
status 1.

From Python:

```python
from pyusbfs.enumeration import list_devices

for device in list_devices():
    print(device)
```

`list_devices(root)` takes the sysfs directory to scan (by default
`pyusbfs.enumeration.SYSFS_PREFIX`). It raises `OSError` at once if that
directory cannot be read; entries that are not devices, or whose attributes
are missing or invalid, are skipped.

Each result is a frozen `DeviceInfo` holding what can be learnt without
opening the device: `bus_number`, `device_address`, `vendor_id`,
`product_id`, `device_version`, `class_code`, `subclass`, `protocol`,
`speed` (a `Speed` or `None`), and `manufacturer_string`, `product_string`
and `serial_number` when the kernel exposes them, plus the `path` it was
read from.

`probe_device(path)` reads a single device from a `SysfsPath`, `str` or
`Path`, raising `OSError` or `ValueError` when a required attribute is
missing or malformed. `SysfsPath.read_attr(attr, convert)` and
`SysfsPath.read_attr_hex(attr)` read individual attribute files.
`Speed.parse` turns a sysfs speed value such as `"480"` or a name such as
`"high"` into a `Speed`, or `None`.

## Parsing descriptors

```python
from pyusbfs.configuration import Configuration

config = Configuration(bytes([
    0x09, 0x02, 0x19, 0x00, 0x01, 0x01, 0x00, 0xE0, 0x00,
    0x09, 0x04, 0x00, 0x00, 0x01, 0x09, 0x00, 0x00, 0x00,
    0x07, 0x05, 0x81, 0x03, 0x04, 0x00, 0x0C,
]))

print(config.configuration_value(), config.num_interfaces())
for interface in config.interfaces():
    for alt in interface.alt_settings():
        print(alt.interface_number(), alt.alternate_setting(), alt.class_code())
        for endpoint in alt.endpoints():
            print(hex(endpoint.address()), endpoint.direction(),
                  endpoint.transfer_type(), endpoint.max_packet_size())
```

`Configuration` raises `ValueError` for a buffer that is too short, does not
start with a configuration descriptor, or whose wTotalLength differs from the
buffer length. Pass `strict=False` to wrap such a buffer anyway; malformed
trailing descriptors are then skipped while iterating.

`interfaces()` groups alternate settings into `InterfaceGroup` objects,
ordered by interface number. `InterfaceAltSetting` and `Endpoint` expose the
descriptor fields as methods, and `descriptors()` on each gives the raw
descriptors that belong to it. `ActiveConfigurationError` describes a device
that is unconfigured or whose active configuration has no descriptor.

Lower-level helpers live in `pyusbfs.descriptors`:

- `Descriptor` wraps one raw descriptor (raising `ValueError` if it is
  shorter than 2 bytes or than its bLength) and exposes its length and type.
- `Descriptors` iterates a run of concatenated descriptors, stopping at the
  first malformed one.
- `validate_config_descriptor` returns the wTotalLength of a valid
  configuration descriptor, or `None`.
- `parse_concatenated_config_descriptors` splits a buffer holding several
  configuration descriptors by their total length, as read from a usbfs
  device node after the 18-byte device descriptor.
- `Direction`, `EndpointType` and the language ID `US_ENGLISH`.

## usbfs operations

`pyusbfs.usbfs` provides `set_configuration`, `claim_interface`,
`release_interface`, `set_interface` and `reset`. Each takes an open file
descriptor (an integer or an object with `fileno()`) of a
`/dev/bus/usb/BBB/DDD` node; opening that node needs write permission,
usually granted by a udev rule. Numbers outside 0..255 raise `ValueError`,
and failed ioctls raise `OSError`.

`errno_to_transfer_error` maps a kernel error number to a `TransferError`
(disconnected, stall, cancelled, fault or unknown).

## What the package does not do

There is no device object and no data transfer: the package does not open
device nodes for you, and has no control, bulk, interrupt or isochronous
transfers, no transfer queues and no event loop. String descriptors are not
read from devices. Only Linux is supported for enumeration and usbfs calls.

## Running the tests

```
pip install "pyusbfs[test]"
python -m pytest
```