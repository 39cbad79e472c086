"""Command that lists connected USB devices."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from pyusbfs.enumeration import SYSFS_PREFIX, list_devices


def main(argv: Sequence[str] | None = None) -> int:
    """List connected USB devices, one per line."""
    parser = argparse.ArgumentParser(description="List connected USB devices.")
    parser.add_argument(
        "--root",
        default=SYSFS_PREFIX,
        help="sysfs directory holding USB device entries",
    )
    args = parser.parse_args(argv)

    try:
        devices = list_devices(args.root)
    except OSError as exc:
        print(f"cannot list devices: {exc}", file=sys.stderr)
        return 1

    for device in devices:
        print(repr(device))
    return 0


if __name__ == "__main__":
    sys.exit(main())