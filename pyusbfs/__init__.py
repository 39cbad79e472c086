"""USB descriptor parsing, Linux sysfs device enumeration and usbfs ioctls."""

__version__ = "0.1.0"